"""Linear instruction form shared by both front ends, the evaluator and the optimizer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from fractions import Fraction

from .errors import TrailingStackError
from .operators import Operator
from .values import Value, format_value


@dataclass(frozen=True)
class CompiledExpression:
    """Operator sequence plus the name and constant pools it consumes in order.

    There is one ``names`` entry per ``LOAD`` and one ``consts`` entry per
    ``CONST``. Instances are never mutated; optimization builds a new one.
    """

    ops: tuple[Operator, ...] = ()
    names: tuple[str, ...] = ()
    consts: tuple[Value, ...] = ()
    trailing_error: TrailingStackError | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        loads = sum(1 for op in self.ops if op is Operator.LOAD)
        consts = sum(1 for op in self.ops if op is Operator.CONST)
        if loads != len(self.names) or consts != len(self.consts):
            raise ValueError(
                f"pool sizes do not match instructions: {loads} LOAD/{len(self.names)} names, "
                f"{consts} CONST/{len(self.consts)} constants"
            )

    def variables(self) -> frozenset[str]:
        return frozenset(self.names)

    def evaluate(self, bindings: Mapping[str, object] | None = None) -> Fraction:
        from .evaluator import evaluate

        return evaluate(self, bindings)

    def optimize(self) -> "CompiledExpression":
        from .optimizer import optimize

        return optimize(self)

    def __str__(self) -> str:
        return render(self)


def render(expr: CompiledExpression) -> str:
    """Space-separated postfix text that ``compile_postfix`` reads back."""
    names = iter(expr.names)
    consts = iter(expr.consts)
    words: list[str] = []
    for op in expr.ops:
        if op is Operator.LOAD:
            words.append(f"({next(names)})")
        elif op is Operator.CONST:
            words.append(format_value(next(consts)))
        else:
            words.append(op.spelling)
    return " ".join(words)


def must(expr: CompiledExpression) -> CompiledExpression:
    """Return ``expr``, raising its trailing-stack error if it carries one."""
    if expr.trailing_error is not None:
        raise TrailingStackError(expr.trailing_error.depth)
    return expr


class ExpressionBuilder:
    """Accumulates instructions and pool entries in emission order."""

    def __init__(self) -> None:
        self.ops: list[Operator] = []
        self.names: list[str] = []
        self.consts: list[Value] = []

    def load(self, name: str) -> None:
        self.ops.append(Operator.LOAD)
        self.names.append(name)

    def const(self, value: Value) -> None:
        self.ops.append(Operator.CONST)
        self.consts.append(value)

    def emit(self, op: Operator) -> None:
        self.ops.append(op)

    def build(self, *, trailing_error: TrailingStackError | None = None) -> CompiledExpression:
        return CompiledExpression(
            ops=tuple(self.ops),
            names=tuple(self.names),
            consts=tuple(self.consts),
            trailing_error=trailing_error,
        )
