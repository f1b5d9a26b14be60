"""Instruction set of the linear form and its spellings in both syntaxes."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Operator(str, Enum):
    NOP = "NOP"
    LOAD = "LOAD"
    CONST = "CONST"

    ABS = "ABS"
    NEG = "NEG"
    NOT = "NOT"
    DENOM = "DENOM"
    INV = "INV"
    NUM = "NUM"
    TRUNC = "TRUNC"
    FLOOR = "FLOOR"
    CEIL = "CEIL"
    RAND = "RAND"

    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    QUO = "QUO"
    AND = "AND"
    ANDNOT = "ANDNOT"
    OR = "OR"
    XOR = "XOR"
    DIV = "DIV"
    MOD = "MOD"
    REM = "REM"
    GCD = "GCD"
    MODINVERSE = "MODINV"
    LSH = "LSH"
    RSH = "RSH"
    BINOMIAL = "BINOMIAL"
    MULRANGE = "MULRANGE"
    FRAC = "FRAC"

    EXP = "EXP"

    @property
    def arity(self) -> int:
        return _ARITY[self]

    @property
    def spelling(self) -> str:
        """Canonical postfix token for this operator."""
        return _SYMBOLS.get(self, self.value)


UNARY: Final[frozenset[Operator]] = frozenset(
    {
        Operator.ABS,
        Operator.NEG,
        Operator.NOT,
        Operator.DENOM,
        Operator.INV,
        Operator.NUM,
        Operator.TRUNC,
        Operator.FLOOR,
        Operator.CEIL,
        Operator.RAND,
    }
)
BINARY: Final[frozenset[Operator]] = frozenset(
    {
        Operator.ADD,
        Operator.SUB,
        Operator.MUL,
        Operator.QUO,
        Operator.AND,
        Operator.ANDNOT,
        Operator.OR,
        Operator.XOR,
        Operator.DIV,
        Operator.MOD,
        Operator.REM,
        Operator.GCD,
        Operator.MODINVERSE,
        Operator.LSH,
        Operator.RSH,
        Operator.BINOMIAL,
        Operator.MULRANGE,
        Operator.FRAC,
    }
)
LEAVES: Final[frozenset[Operator]] = frozenset({Operator.LOAD, Operator.CONST})

_ARITY: Final[dict[Operator, int]] = {
    Operator.NOP: 0,
    Operator.LOAD: 0,
    Operator.CONST: 0,
    Operator.EXP: 3,
    **{op: 1 for op in UNARY},
    **{op: 2 for op in BINARY},
}

_SYMBOLS: Final[dict[Operator, str]] = {
    Operator.ADD: "+",
    Operator.SUB: "-",
    Operator.MUL: "*",
    Operator.QUO: "/",
    Operator.AND: "&",
    Operator.ANDNOT: "&^",
    Operator.OR: "|",
    Operator.XOR: "^",
    Operator.LSH: "<<",
    Operator.RSH: ">>",
    Operator.REM: "%",
}

# Upper-cased postfix spellings; LOAD and CONST have no token of their own.
POSTFIX_KEYWORDS: Final[dict[str, Operator]] = {
    **{op.value: op for op in Operator if op not in LEAVES},
    **{symbol: op for op, symbol in _SYMBOLS.items()},
}

# Infix binary operators with Go-style precedence (higher binds tighter).
INFIX_BINARY: Final[dict[str, tuple[Operator, int]]] = {
    "*": (Operator.MUL, 5),
    "/": (Operator.QUO, 5),
    "%": (Operator.REM, 5),
    "<<": (Operator.LSH, 5),
    ">>": (Operator.RSH, 5),
    "&": (Operator.AND, 5),
    "&^": (Operator.ANDNOT, 5),
    "+": (Operator.ADD, 4),
    "-": (Operator.SUB, 4),
    "|": (Operator.OR, 4),
    "^": (Operator.XOR, 4),
}

# Unary prefix operators; unary plus compiles to a pass-through.
INFIX_UNARY: Final[dict[str, Operator]] = {
    "+": Operator.NOP,
    "-": Operator.NEG,
    "^": Operator.NOT,
}

# Call-syntax functions for the extended operator set.
INFIX_FUNCTIONS: Final[dict[str, Operator]] = {
    "abs": Operator.ABS,
    "binomial": Operator.BINOMIAL,
    "div": Operator.DIV,
    "exp": Operator.EXP,
    "gcd": Operator.GCD,
    "mod": Operator.MOD,
    "modinv": Operator.MODINVERSE,
    "mulrange": Operator.MULRANGE,
    "frac": Operator.FRAC,
    "denom": Operator.DENOM,
    "inv": Operator.INV,
    "num": Operator.NUM,
    "trunc": Operator.TRUNC,
    "floor": Operator.FLOOR,
    "ceil": Operator.CEIL,
    "rand": Operator.RAND,
}
