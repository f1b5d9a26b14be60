"""Structured error types for compile-time and evaluation-time failures."""

from __future__ import annotations


class RPNError(Exception):
    """Base class for structured rpn-rat errors."""


class MissingVariableError(RPNError, KeyError):
    """A variable in the expression is not bound to a numeric value."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"missing var {self.name}"


class TypeMismatchError(RPNError, TypeError):
    """An operand has the wrong numeric kind for its operator."""

    def __init__(self, needed: str, found: str | None = None, *, op: str | None = None) -> None:
        super().__init__(needed)
        self.needed = needed
        self.found = found
        self.op = op

    def __str__(self) -> str:
        where = f"{self.op}: " if self.op else ""
        found = f"; found {self.found}" if self.found is not None else ""
        return f"{where}incorrect type; needed {self.needed}{found}"


class NumericOverflowError(RPNError, OverflowError):
    """An operand exceeds the native-width bound an operator requires."""

    def __init__(self, op: str | None = None) -> None:
        super().__init__(op)
        self.op = op

    def __str__(self) -> str:
        return f"{self.op}: overflow" if self.op else "overflow"


class DivisionByZeroError(RPNError, ZeroDivisionError):
    """Division, modulus or inversion by zero."""

    def __init__(self, op: str | None = None) -> None:
        super().__init__(op)
        self.op = op

    def __str__(self) -> str:
        return f"{self.op}: division by zero" if self.op else "division by zero"


class NoInverseError(DivisionByZeroError):
    """Modular inverse requested for operands that are not coprime."""

    def __str__(self) -> str:
        return f"{self.op}: no modular inverse" if self.op else "no modular inverse"


class BadCallError(RPNError, SyntaxError):
    """A function has been called with the wrong number of arguments."""

    def __init__(self, name: str, expected: int, found: int) -> None:
        super().__init__(f"bad call; needed {expected} args")
        self.name = name
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        return f"bad call to {self.name}; needed {self.expected} args, got {self.found}"


class BadTokenError(RPNError, SyntaxError):
    """A construct in the source text could not be recognized."""

    def __init__(self, text: str, pos: int | None = None) -> None:
        super().__init__(f"bad token {text}")
        self.text = text
        self.pos = pos

    def __str__(self) -> str:
        if self.pos is None:
            return f"bad token {self.text}"
        return f"bad token {self.text} at position {self.pos}"


class StackUnderflowError(RPNError, SyntaxError):
    """A postfix token needs more operands than are on the stack."""

    def __init__(self, token: str, pos: int) -> None:
        super().__init__(f"insufficient arguments to {token}")
        self.token = token
        self.pos = pos

    def __str__(self) -> str:
        return f"insufficient arguments to {self.token} at position {self.pos}"


class TrailingStackError(RPNError):
    """A postfix expression leaves more than one value on the stack.

    Non-fatal: the compiled expression is still usable and carries this error
    in its ``trailing_error`` attribute.
    """

    def __init__(self, depth: int) -> None:
        super().__init__(depth)
        self.depth = depth

    def __str__(self) -> str:
        return f"expression ends with {self.depth} values on stack"


class NotImplementedOperatorError(RPNError, NotImplementedError):
    """A reserved operator was compiled or executed."""

    def __init__(self, op: str) -> None:
        super().__init__(op)
        self.op = op

    def __str__(self) -> str:
        return f"{self.op}: not implemented"


class InternalInvariantError(RPNError, RuntimeError):
    """Malformed internal state, reachable only through a malformed instruction sequence."""
