"""Exact numeric value model: integers, rationals and the absent sentinel.

A ``Value`` is a Python ``int`` (Integer), a ``fractions.Fraction`` with a
denominator other than 1 (Rational), or ``None`` (Absent). Both numeric kinds
are immutable, so every value read from a constant pool or a caller's binding
can be pushed onto the evaluation stack without aliasing concerns.
"""

from __future__ import annotations

from enum import Enum
from fractions import Fraction
from typing import Union

Value = Union[int, Fraction, None]

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1


class ValueKind(str, Enum):
    INTEGER = "int"
    RATIONAL = "rat"
    ABSENT = "<nil>"


def kind_of(value: object) -> ValueKind:
    """Classify a stack value; anything outside the model is an invariant breach."""
    if value is None:
        return ValueKind.ABSENT
    if isinstance(value, bool):
        raise TypeError(f"bool is not a numeric value: {value!r}")
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, Fraction):
        return ValueKind.RATIONAL
    raise TypeError(f"unsupported value {value!r}")


def demote(value: Fraction) -> int | Fraction:
    if value.denominator == 1:
        return value.numerator
    return value


def normalize(value: object) -> Value:
    """Bring an externally supplied number into the value model.

    Returns ``None`` for anything that is not an exact integer or rational,
    so callers can report the binding as missing.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, Fraction):
        return demote(value)
    return None


def widen(value: int | Fraction) -> Fraction:
    return Fraction(value)


def fits_int64(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


def fits_uint(value: int) -> bool:
    return 0 <= value <= UINT64_MAX


def format_value(value: Value) -> str:
    """Exact numeral text, re-parseable by the literal parser."""
    if value is None:
        return "<nil>"
    return str(value)
