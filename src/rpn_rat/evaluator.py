"""Stack-machine evaluator for the linear instruction form."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from fractions import Fraction
from typing import Callable, Final

from .config import MAX_RESULT_BITS
from .errors import (
    DivisionByZeroError,
    InternalInvariantError,
    MissingVariableError,
    NoInverseError,
    NotImplementedOperatorError,
    NumericOverflowError,
    RPNError,
    TypeMismatchError,
)
from .expression import CompiledExpression
from .operators import Operator
from .values import Value, ValueKind, demote, fits_int64, fits_uint, kind_of, normalize, widen

_NUMERIC: Final[str] = "int or rat"


def _kind(value: object) -> ValueKind:
    try:
        return kind_of(value)
    except TypeError as err:
        raise InternalInvariantError(f"unknown value on stack: {value!r}") from err


def _require_int(value: object, op: Operator) -> int:
    kind = _kind(value)
    if kind is not ValueKind.INTEGER:
        raise TypeMismatchError(ValueKind.INTEGER.value, kind.value, op=op.value)
    return value  # type: ignore[return-value]


def _require_numeric(value: object, op: Operator) -> int | Fraction:
    kind = _kind(value)
    if kind is ValueKind.ABSENT:
        raise TypeMismatchError(_NUMERIC, kind.value, op=op.value)
    return value  # type: ignore[return-value]


class Evaluator:
    """Execution context: value stack, caller bindings, and pool cursors.

    Values taken from the pools or the bindings are pushed as-is; both numeric
    kinds are immutable, so no operator can write back into a pool or into the
    caller's mapping.
    """

    def __init__(
        self,
        *,
        stack: Iterable[Value] = (),
        bindings: Mapping[str, object] | None = None,
        names: tuple[str, ...] = (),
        consts: tuple[Value, ...] = (),
    ) -> None:
        self.stack: list[Value] = list(stack)
        self.bindings: Mapping[str, object] = bindings if bindings is not None else {}
        self.names = names
        self.consts = consts
        self.n = 0
        self.c = 0

    def top(self) -> Value:
        if not self.stack:
            raise InternalInvariantError("stack is empty")
        return self.stack[-1]

    def pop(self) -> Value:
        value = self.top()
        self.stack.pop()
        return value

    def set_top(self, value: Value) -> None:
        self.stack[-1] = value

    def push(self, value: Value) -> None:
        self.stack.append(value)

    def step(self, op: Operator) -> None:
        fn = _OP_FUNCS.get(op)
        if fn is None:
            raise InternalInvariantError(f"unknown operator {op!r}")
        try:
            fn(self)
        except MemoryError as err:
            raise NumericOverflowError(op.value) from err

    def run(self, ops: Iterable[Operator]) -> None:
        for op in ops:
            self.step(op)


def _op_nop(_: Evaluator) -> None:
    return None


def _op_load(e: Evaluator) -> None:
    if e.n >= len(e.names):
        raise InternalInvariantError("name pool exhausted")
    name = e.names[e.n]
    value = normalize(e.bindings.get(name))
    if value is None:
        raise MissingVariableError(name)
    e.push(value)
    e.n += 1


def _op_const(e: Evaluator) -> None:
    if e.c >= len(e.consts):
        raise InternalInvariantError("constant pool exhausted")
    e.push(e.consts[e.c])
    e.c += 1


def _numeric_unary(op: Operator, fn: Callable[[int | Fraction], int | Fraction]) -> Callable[[Evaluator], None]:
    def run(e: Evaluator) -> None:
        x = _require_numeric(e.top(), op)
        result = fn(x)
        e.set_top(demote(result) if isinstance(result, Fraction) else result)

    return run


def _numeric_binary(
    op: Operator, fn: Callable[[int | Fraction, int | Fraction], int | Fraction]
) -> Callable[[Evaluator], None]:
    """Integer/rational arithmetic; mixed operands promote, results demote."""

    def run(e: Evaluator) -> None:
        x = _require_numeric(e.pop(), op)
        y = _require_numeric(e.top(), op)
        result = fn(y, x)
        e.set_top(demote(result) if isinstance(result, Fraction) else result)

    return run


def _numeric_round(op: Operator, fn: Callable[[Fraction], int]) -> Callable[[Evaluator], None]:
    def run(e: Evaluator) -> None:
        x = _require_numeric(e.top(), op)
        if isinstance(x, Fraction):
            e.set_top(fn(x))

    return run


def _integer_unary(op: Operator, fn: Callable[[int], int]) -> Callable[[Evaluator], None]:
    def run(e: Evaluator) -> None:
        e.set_top(fn(_require_int(e.top(), op)))

    return run


def _integer_binary(op: Operator, fn: Callable[[int, int], int]) -> Callable[[Evaluator], None]:
    def run(e: Evaluator) -> None:
        a = _require_int(e.pop(), op)
        b = _require_int(e.top(), op)
        e.set_top(fn(b, a))

    return run


def _integer_division(op: Operator, fn: Callable[[int, int], int]) -> Callable[[Evaluator], None]:
    def run(e: Evaluator) -> None:
        a = _require_int(e.pop(), op)
        b = _require_int(e.top(), op)
        if a == 0:
            raise DivisionByZeroError(op.value)
        e.set_top(fn(b, a))

    return run


def _integer_overflow(op: Operator, fn: Callable[[int, int], int]) -> Callable[[Evaluator], None]:
    """Integer ops whose operands must fit a signed 64-bit word."""

    def run(e: Evaluator) -> None:
        a = _require_int(e.pop(), op)
        b = _require_int(e.top(), op)
        if not (fits_int64(a) and fits_int64(b)):
            raise NumericOverflowError(op.value)
        e.set_top(fn(b, a))

    return run


def _integer_shift(
    op: Operator, fn: Callable[[int, int], int], *, grows: bool = False
) -> Callable[[Evaluator], None]:
    def run(e: Evaluator) -> None:
        a = _require_int(e.pop(), op)
        b = _require_int(e.top(), op)
        if not fits_uint(a):
            raise NumericOverflowError(op.value)
        if grows and b:
            _check_result_bits(b.bit_length() + a, op)
        e.set_top(fn(b, a))

    return run


def _check_result_bits(bits: int, op: Operator) -> None:
    if bits > MAX_RESULT_BITS:
        raise NumericOverflowError(op.value)


def _euclid_divmod(x: int, y: int) -> tuple[int, int]:
    q, r = divmod(x, y)
    if r < 0:
        q, r = q + 1, r - y
    return q, r


def _truncated_rem(x: int, y: int) -> int:
    r = abs(x) % abs(y)
    return -r if x < 0 else r


def _mod_inverse(g: int, n: int) -> int:
    if n == 0:
        raise DivisionByZeroError(Operator.MODINVERSE.value)
    try:
        return pow(g, -1, abs(n))
    except ValueError as err:
        raise NoInverseError(Operator.MODINVERSE.value) from err


def _binomial(n: int, k: int) -> int:
    if k < 0 or k > n:
        return 0
    # C(n, k) < 2**n and C(n, k) <= n**min(k, n - k)
    _check_result_bits(min(n, min(k, n - k) * n.bit_length()), Operator.BINOMIAL)
    return math.comb(n, k)


def _mul_range(low: int, high: int) -> int:
    if low > high:
        return 1
    if low <= 0 <= high:
        return 0
    negative = False
    if low < 0:
        negative = (high - low) % 2 == 0
        low, high = -high, -low
    _check_result_bits((high - low + 1) * high.bit_length(), Operator.MULRANGE)
    product = math.prod(range(low, high + 1))
    return -product if negative else product


def _op_quo(e: Evaluator) -> None:
    a = _require_numeric(e.pop(), Operator.QUO)
    b = _require_numeric(e.top(), Operator.QUO)
    if a == 0:
        raise DivisionByZeroError(Operator.QUO.value)
    e.set_top(demote(Fraction(b) / a))


def _op_exp(e: Evaluator) -> None:
    m = e.pop()
    exponent = _require_int(e.pop(), Operator.EXP)
    base = _require_int(e.top(), Operator.EXP)
    modulus = None if m is None else _require_int(m, Operator.EXP)
    if (exponent < 0 or not modulus) and abs(base) > 1:
        _check_result_bits((abs(base).bit_length() - 1) * abs(exponent) + 1, Operator.EXP)
    if exponent < 0:
        # Reciprocal of the positive power; the modulus does not apply.
        if base == 0:
            raise DivisionByZeroError(Operator.EXP.value)
        e.set_top(demote(Fraction(1, base**-exponent)))
    elif not modulus:
        e.set_top(base**exponent)
    else:
        e.set_top(pow(base, exponent, abs(modulus)))


def _op_inv(e: Evaluator) -> None:
    x = _require_numeric(e.top(), Operator.INV)
    if x == 0:
        raise DivisionByZeroError(Operator.INV.value)
    e.set_top(demote(1 / Fraction(x)))


def _op_frac(e: Evaluator) -> None:
    den = _require_int(e.pop(), Operator.FRAC)
    num = _require_int(e.top(), Operator.FRAC)
    if den == 0:
        raise DivisionByZeroError(Operator.FRAC.value)
    e.set_top(demote(Fraction(num, den)))


def _op_denom(e: Evaluator) -> None:
    x = _require_numeric(e.top(), Operator.DENOM)
    e.set_top(x.denominator if isinstance(x, Fraction) else 1)


def _op_num(e: Evaluator) -> None:
    x = _require_numeric(e.top(), Operator.NUM)
    if isinstance(x, Fraction):
        e.set_top(x.numerator)


def _op_rand(_: Evaluator) -> None:
    raise NotImplementedOperatorError(Operator.RAND.value)


_OP_FUNCS: Final[dict[Operator, Callable[[Evaluator], None]]] = {
    Operator.NOP: _op_nop,
    Operator.LOAD: _op_load,
    Operator.CONST: _op_const,
    Operator.ABS: _numeric_unary(Operator.ABS, abs),
    Operator.NEG: _numeric_unary(Operator.NEG, lambda x: -x),
    Operator.NOT: _integer_unary(Operator.NOT, lambda x: ~x),
    Operator.DENOM: _op_denom,
    Operator.INV: _op_inv,
    Operator.NUM: _op_num,
    Operator.TRUNC: _numeric_round(Operator.TRUNC, math.trunc),
    Operator.FLOOR: _numeric_round(Operator.FLOOR, math.floor),
    Operator.CEIL: _numeric_round(Operator.CEIL, math.ceil),
    Operator.RAND: _op_rand,
    Operator.ADD: _numeric_binary(Operator.ADD, lambda y, x: y + x),
    Operator.SUB: _numeric_binary(Operator.SUB, lambda y, x: y - x),
    Operator.MUL: _numeric_binary(Operator.MUL, lambda y, x: y * x),
    Operator.QUO: _op_quo,
    Operator.AND: _integer_binary(Operator.AND, lambda y, x: y & x),
    Operator.ANDNOT: _integer_binary(Operator.ANDNOT, lambda y, x: y & ~x),
    Operator.OR: _integer_binary(Operator.OR, lambda y, x: y | x),
    Operator.XOR: _integer_binary(Operator.XOR, lambda y, x: y ^ x),
    Operator.DIV: _integer_division(Operator.DIV, lambda y, x: _euclid_divmod(y, x)[0]),
    Operator.MOD: _integer_division(Operator.MOD, lambda y, x: _euclid_divmod(y, x)[1]),
    Operator.REM: _integer_division(Operator.REM, _truncated_rem),
    Operator.GCD: _integer_binary(Operator.GCD, math.gcd),
    Operator.MODINVERSE: _integer_binary(Operator.MODINVERSE, _mod_inverse),
    Operator.LSH: _integer_shift(Operator.LSH, lambda y, x: y << x, grows=True),
    Operator.RSH: _integer_shift(Operator.RSH, lambda y, x: y >> x),
    Operator.BINOMIAL: _integer_overflow(Operator.BINOMIAL, _binomial),
    Operator.MULRANGE: _integer_overflow(Operator.MULRANGE, _mul_range),
    Operator.FRAC: _op_frac,
    Operator.EXP: _op_exp,
}


def apply_operator(op: Operator, operands: Iterable[Value]) -> Value:
    """Run a single non-leaf operator on an isolated stack of ``operands``."""
    scratch = Evaluator(stack=operands)
    scratch.step(op)
    if len(scratch.stack) != 1:
        raise InternalInvariantError(f"{op.value} left {len(scratch.stack)} values on a scratch stack")
    return scratch.stack[0]


def evaluate(expr: CompiledExpression, bindings: Mapping[str, object] | None = None) -> Fraction:
    """Execute ``expr`` against ``bindings`` and return the exact result.

    The result is always a ``Fraction`` (integers are widened). Execution stops
    at the first failing instruction and raises its ``RPNError``.
    """
    e = Evaluator(bindings=bindings, names=expr.names, consts=expr.consts)
    e.run(expr.ops)

    if len(e.stack) == 1 or (expr.trailing_error is not None and len(e.stack) > 1):
        result = e.stack[0]
    else:
        raise InternalInvariantError(f"expression left {len(e.stack)} values on stack")

    kind = _kind(result)
    if kind is ValueKind.ABSENT:
        raise TypeMismatchError(_NUMERIC, kind.value, op="result")
    return widen(result)


def evaluate_with_errors(
    expr: CompiledExpression, bindings: Mapping[str, object] | None = None
) -> tuple[Fraction | None, RPNError | None]:
    """Evaluate, returning ``(result, None)`` or ``(None, error)``."""
    try:
        return evaluate(expr, bindings), None
    except InternalInvariantError:
        raise
    except RPNError as err:
        return None, err
