"""Literal parsing: numeral text to an exact integer or rational value."""

from __future__ import annotations

import re
from fractions import Fraction

from .values import demote

_INTEGER_RE = re.compile(
    r"""
    ^
    (?P<sign>[+-]?)
    (?:
        0[xX](?P<hex>_?[0-9a-fA-F]+(?:_[0-9a-fA-F]+)*)
      |
        0[bB](?P<bin>_?[01]+(?:_[01]+)*)
      |
        0[oO]?(?P<oct>_?[0-7]+(?:_[0-7]+)*)
      |
        (?P<dec>0|[1-9](?:_?[0-9])*)
    )
    $
    """,
    re.VERBOSE,
)

_FRACTION_RE = re.compile(r"^(?P<num>[+-]?[0-9]+)/(?P<den>[0-9]+)$")

# Larger decimal exponents are rejected rather than expanded.
_MAX_DECIMAL_EXPONENT = 1_000_000

_DECIMAL_RE = re.compile(
    r"""
    ^
    (?P<sign>[+-]?)
    (?=[0-9]|\.[0-9])                     # at least one digit
    (?P<int>[0-9]*)
    (?:\.(?P<frac>[0-9]*))?
    (?:[eE](?P<exp>[+-]?[0-9]+))?
    $
    """,
    re.VERBOSE,
)


def _parse_integer(text: str) -> int | None:
    m = _INTEGER_RE.match(text)
    if not m:
        return None
    sign = -1 if m.group("sign") == "-" else 1
    if m.group("hex") is not None:
        return sign * int(m.group("hex").replace("_", ""), 16)
    if m.group("bin") is not None:
        return sign * int(m.group("bin").replace("_", ""), 2)
    if m.group("oct") is not None:
        return sign * int(m.group("oct").replace("_", ""), 8)
    return sign * int(m.group("dec").replace("_", ""), 10)


def _parse_fraction(text: str) -> int | Fraction | None:
    m = _FRACTION_RE.match(text)
    if not m:
        return None
    den = int(m.group("den"))
    if den == 0:
        return None
    return demote(Fraction(int(m.group("num")), den))


def _parse_decimal(text: str) -> int | Fraction | None:
    m = _DECIMAL_RE.match(text)
    if not m:
        return None
    int_part = m.group("int")
    frac_part = m.group("frac") or ""
    exp_text = (m.group("exp") or "0").lstrip("+-").lstrip("0")
    if len(exp_text) > 7 or int(exp_text or "0") > _MAX_DECIMAL_EXPONENT:
        return None
    exponent = int(m.group("exp") or "0") - len(frac_part)
    mantissa = int((int_part + frac_part) or "0")
    if m.group("sign") == "-":
        mantissa = -mantissa
    if exponent >= 0:
        return mantissa * 10**exponent
    return demote(Fraction(mantissa, 10**-exponent))


def parse_numeral(text: str) -> int | Fraction | None:
    """Parse ``text`` into an exact value, or return ``None`` on failure.

    Accepted forms: a signed integer with optional base prefix (``0x`` hex,
    ``0b`` binary, ``0``/``0o`` octal, decimal otherwise); two decimal integers
    separated by ``/``; or a decimal literal with optional fraction and
    exponent, converted exactly (never through floating point).
    """
    if not text or text != text.strip():
        return None
    if "/" in text:
        return _parse_fraction(text)
    lowered = text.lower()
    is_hex = lowered.lstrip("+-").startswith("0x")
    if not is_hex and ("." in text or "e" in lowered):
        return _parse_decimal(text)
    return _parse_integer(text)
