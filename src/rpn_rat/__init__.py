"""rpn-rat public API."""

from .errors import (
    BadCallError,
    BadTokenError,
    DivisionByZeroError,
    InternalInvariantError,
    MissingVariableError,
    NoInverseError,
    NotImplementedOperatorError,
    NumericOverflowError,
    RPNError,
    StackUnderflowError,
    TrailingStackError,
    TypeMismatchError,
)
from .evaluator import evaluate, evaluate_with_errors
from .expression import CompiledExpression, must, render
from .infix import compile_infix
from .numerals import parse_numeral
from .operators import Operator
from .optimizer import optimize
from .parser import ParseError
from .postfix import compile_postfix

__all__ = [
    "compile_infix",
    "compile_postfix",
    "evaluate",
    "evaluate_with_errors",
    "optimize",
    "render",
    "must",
    "parse_numeral",
    "CompiledExpression",
    "Operator",
    "ParseError",
    "RPNError",
    "MissingVariableError",
    "TypeMismatchError",
    "NumericOverflowError",
    "DivisionByZeroError",
    "NoInverseError",
    "BadCallError",
    "BadTokenError",
    "StackUnderflowError",
    "TrailingStackError",
    "NotImplementedOperatorError",
    "InternalInvariantError",
]
