"""Parser for the infix expression syntax (Go-style operators and precedence)."""

from __future__ import annotations

from dataclasses import dataclass

from .ast import Call, Expr, Infix, Literal, Name, Number, Paren, Prefix
from .errors import RPNError
from .lexer import Token, tokenize
from .operators import INFIX_BINARY, INFIX_UNARY

_PRIMARY_START = ("NUMBER", "STRING", "CHAR", "NAME", "LPAREN")


class ParseError(RPNError, SyntaxError):
    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


@dataclass
class _Parser:
    tokens: list[Token]
    index: int = 0

    def parse_expression_only(self) -> Expr:
        expr = self._parse_expression(0)
        self._expect("EOF")
        return expr

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            self._error(tok, expected=(kind,))
        return self._advance()

    def _error(self, tok: Token | None = None, *, message: str | None = None, expected: tuple[str, ...] = ()) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        if token.kind == "EOF":
            found = "EOF"
        else:
            found = f"{token.kind}({token.text})"
        raise ParseError(detail, token.pos, token.end, expected=tuple(dict.fromkeys(expected)), found=found)

    def _match(self, kind: str) -> bool:
        if self._peek().kind == kind:
            self._advance()
            return True
        return False

    def _parse_expression(self, min_prec: int) -> Expr:
        left = self._parse_unary()
        while True:
            tok = self._peek()
            if tok.kind != "OP" or tok.text not in INFIX_BINARY:
                break
            _, prec = INFIX_BINARY[tok.text]
            if prec < min_prec:
                break
            self._advance()
            # Left-associative: the right operand only takes tighter operators.
            right = self._parse_expression(prec + 1)
            left = Infix(op=tok.text, left=left, right=right, pos=tok.pos)
        return left

    def _parse_unary(self) -> Expr:
        tok = self._peek()
        if tok.kind == "OP" and tok.text in INFIX_UNARY:
            self._advance()
            return Prefix(op=tok.text, right=self._parse_unary(), pos=tok.pos)
        return self._parse_postfix()

    def _parse_postfix(self) -> Expr:
        expr = self._parse_primary()
        while self._peek().kind == "LPAREN":
            open_tok = self._advance()
            args: list[Expr] = []
            while self._peek().kind != "RPAREN":
                args.append(self._parse_expression(0))
                if not self._match("COMMA"):
                    break
            self._expect("RPAREN")
            expr = Call(func=expr, args=tuple(args), pos=open_tok.pos)
        return expr

    def _parse_primary(self) -> Expr:
        tok = self._peek()

        if tok.kind == "NUMBER":
            self._advance()
            return Number(text=tok.text, pos=tok.pos)

        if tok.kind in {"STRING", "CHAR"}:
            self._advance()
            return Literal(kind=tok.kind, text=tok.text, pos=tok.pos)

        if tok.kind == "NAME":
            self._advance()
            return Name(value=tok.text, pos=tok.pos)

        if self._match("LPAREN"):
            inner = self._parse_expression(0)
            self._expect("RPAREN")
            return Paren(inner=inner)

        self._error(tok, expected=_PRIMARY_START)
        raise AssertionError("unreachable")


def parse(source: str) -> Expr:
    tokens = tokenize(source)
    parser = _Parser(tokens=tokens)
    return parser.parse_expression_only()
