"""Postfix front end: one-pass lexing and compilation with stack-depth checking."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache

from .config import COMPILE_CACHE_MAX, USE_COMPILE_CACHE
from .errors import BadTokenError, NotImplementedOperatorError, StackUnderflowError, TrailingStackError
from .expression import CompiledExpression, ExpressionBuilder
from .numerals import parse_numeral
from .operators import POSTFIX_KEYWORDS, Operator
from .values import Value

_WORD_RE = re.compile(r"\S+")


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    op: Operator | None = None
    value: Value = None


def _lex_ident(word: str) -> str | None:
    if word == "_":
        return None
    if word.startswith("(") and word.endswith(")"):
        word = word[1:-1]
    if not word or word[0].isdigit():
        return None
    if not all(ch == "_" or ch.isalnum() for ch in word):
        return None
    return word


def _lex_word(word: str, pos: int) -> Token:
    op = POSTFIX_KEYWORDS.get(word.upper())
    if op is not None:
        return Token("OP", word, pos, op=op)
    ident = _lex_ident(word)
    if ident is not None:
        return Token("IDENT", ident, pos)
    if word == "_" or word.casefold() == "<nil>":
        return Token("NIL", word, pos)
    value = parse_numeral(word)
    if value is not None:
        return Token("LIT", word, pos, value=value)
    raise BadTokenError(word, pos)


def _iter_tokens(source: str) -> Iterator[Token]:
    for m in _WORD_RE.finditer(source):
        yield _lex_word(m.group(), m.start())


def tokenize(source: str) -> list[Token]:
    return list(_iter_tokens(source))


def _compile_postfix(source: str) -> CompiledExpression:
    out = ExpressionBuilder()
    depth = 0
    for tok in _iter_tokens(source):
        if tok.kind == "LIT":
            out.const(tok.value)
            depth += 1
        elif tok.kind == "IDENT":
            out.load(tok.text)
            depth += 1
        elif tok.kind == "NIL":
            out.const(None)
            depth += 1
        elif tok.op is Operator.RAND:
            raise NotImplementedOperatorError(tok.op.value)
        elif tok.op is not None:
            if tok.op is not Operator.NOP:
                # An n-ary operator consumes n values and produces one.
                depth -= tok.op.arity - 1
                if depth < 1:
                    raise StackUnderflowError(tok.text, tok.pos)
            out.emit(tok.op)

    trailing = TrailingStackError(depth) if depth > 1 else None
    return out.build(trailing_error=trailing)


@lru_cache(maxsize=COMPILE_CACHE_MAX)
def _compile_postfix_cached(source: str) -> CompiledExpression:
    return _compile_postfix(source)


def compile_postfix(source: str, *, strict: bool = False) -> CompiledExpression:
    """Compile whitespace-delimited postfix text such as ``"3 4 +"``.

    Operators are matched case-insensitively in symbolic or keyword spelling;
    a word that collides with a keyword can be used as a variable by wrapping
    it in parentheses, e.g. ``(add)``. ``_`` and ``<nil>`` denote the absent
    value.

    If the stream leaves more than one value on the stack the result still
    compiles and carries a ``TrailingStackError`` in ``trailing_error``;
    with ``strict=True`` that error is raised instead.
    """
    expr = _compile_postfix_cached(source) if USE_COMPILE_CACHE else _compile_postfix(source)
    if strict and expr.trailing_error is not None:
        raise TrailingStackError(expr.trailing_error.depth)
    return expr
