"""Infix front end: parse expression text and emit the linear form in post-order."""

from __future__ import annotations

from functools import lru_cache

from .ast import Call, Expr, Infix, Literal, Name, Number, Paren, Prefix
from .config import COMPILE_CACHE_MAX, USE_COMPILE_CACHE
from .errors import BadCallError, BadTokenError, NotImplementedOperatorError
from .expression import CompiledExpression, ExpressionBuilder
from .numerals import parse_numeral
from .operators import INFIX_BINARY, INFIX_FUNCTIONS, INFIX_UNARY, Operator
from .parser import parse


class _Emitter:
    def __init__(self) -> None:
        self.out = ExpressionBuilder()

    def emit_expr(self, expr: Expr) -> None:
        if isinstance(expr, Number):
            value = parse_numeral(expr.text)
            if value is None:
                raise BadTokenError(expr.text, expr.pos)
            self.out.const(value)
            return

        if isinstance(expr, Name):
            self.out.load(expr.value)
            return

        if isinstance(expr, Paren):
            self.emit_expr(expr.inner)
            return

        if isinstance(expr, Prefix):
            self.emit_expr(expr.right)
            self.out.emit(INFIX_UNARY[expr.op])
            return

        if isinstance(expr, Infix):
            self.emit_expr(expr.left)
            self.emit_expr(expr.right)
            self.out.emit(INFIX_BINARY[expr.op][0])
            return

        if isinstance(expr, Call):
            self._emit_call(expr)
            return

        if isinstance(expr, Literal):
            raise BadTokenError(expr.text, expr.pos)

        raise BadTokenError(type(expr).__name__)

    def _emit_call(self, call: Call) -> None:
        if not isinstance(call.func, Name) or call.func.value not in INFIX_FUNCTIONS:
            text = call.func.value if isinstance(call.func, Name) else type(call.func).__name__
            raise BadTokenError(text, call.pos)

        name = call.func.value
        op = INFIX_FUNCTIONS[name]
        if op is Operator.RAND:
            raise NotImplementedOperatorError(op.value)

        found = len(call.args)
        if op is Operator.EXP:
            if found < 2:
                raise BadCallError(name, 2, found)
            if found > 3:
                raise BadCallError(name, 3, found)
        elif found != op.arity:
            raise BadCallError(name, op.arity, found)

        for arg in call.args:
            self.emit_expr(arg)
        if op is Operator.EXP and found == 2:
            self.out.const(None)
        self.out.emit(op)


@lru_cache(maxsize=COMPILE_CACHE_MAX)
def _compile_infix_cached(source: str) -> CompiledExpression:
    return _compile_infix(source)


def _compile_infix(source: str) -> CompiledExpression:
    emitter = _Emitter()
    emitter.emit_expr(parse(source))
    return emitter.out.build()


def compile_infix(source: str) -> CompiledExpression:
    """Compile conventional infix text such as ``"x*x + exp(2, n, m)"``.

    Raises ``ParseError`` for malformed syntax, ``BadTokenError`` for
    unsupported literals or call targets, and ``BadCallError`` for calls with
    the wrong number of arguments.
    """
    if USE_COMPILE_CACHE:
        return _compile_infix_cached(source)
    return _compile_infix(source)
