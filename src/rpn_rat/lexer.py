"""Tokenization for the infix expression syntax."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import BadTokenError


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


_SINGLE_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    ",": "COMMA",
}

# Longest spellings first so "&^" wins over "&" and "<<" over a lone "<".
_OPERATORS = ("&^", "<<", ">>", "+", "-", "*", "/", "%", "&", "|", "^")

_QUOTES = {'"': "STRING", "'": "CHAR", "`": "STRING"}


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _scan_while(source: str, start: int, predicate) -> int:
    i = start
    while i < len(source) and predicate(source[i]):
        i += 1
    return i


def _scan_number(source: str, start: int) -> int:
    """Scan a numeric literal; the numeral parser decides whether it is valid."""
    i = start
    if source.startswith(("0x", "0X", "0b", "0B", "0o", "0O"), i):
        return _scan_while(source, i + 2, _is_ident_continue)

    i = _scan_while(source, i, lambda ch: ch.isdigit() or ch == "_")
    if i < len(source) and source[i] == ".":
        i = _scan_while(source, i + 1, lambda ch: ch.isdigit() or ch == "_")
    if i < len(source) and source[i] in {"e", "E"}:
        i += 1
        if i < len(source) and source[i] in {"+", "-"}:
            i += 1
        i = _scan_while(source, i, lambda ch: ch.isdigit() or ch == "_")
    # Imaginary suffixes and stray letters stay attached so the literal is rejected whole.
    return _scan_while(source, i, _is_ident_continue)


def _scan_quoted(source: str, start: int) -> int:
    quote = source[start]
    i = start + 1
    while i < len(source):
        ch = source[i]
        if ch == "\\" and quote != "`":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            break
        i += 1
    raise BadTokenError(source[start:i], start)


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch.isspace():
            i += 1
            continue

        if ch in _SINGLE_TOKENS:
            tokens.append(Token(_SINGLE_TOKENS[ch], ch, i, i + 1))
            i += 1
            continue

        if ch.isdigit() or (ch == "." and i + 1 < len(source) and source[i + 1].isdigit()):
            end = _scan_number(source, i)
            tokens.append(Token("NUMBER", source[i:end], i, end))
            i = end
            continue

        if _is_ident_start(ch):
            end = _scan_while(source, i + 1, _is_ident_continue)
            tokens.append(Token("NAME", source[i:end], i, end))
            i = end
            continue

        if ch in _QUOTES:
            end = _scan_quoted(source, i)
            tokens.append(Token(_QUOTES[ch], source[i:end], i, end))
            i = end
            continue

        op = next((sym for sym in _OPERATORS if source.startswith(sym, i)), None)
        if op is not None:
            tokens.append(Token("OP", op, i, i + len(op)))
            i += len(op)
            continue

        raise BadTokenError(ch, i)

    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens
