"""Command-line driver: compile an expression, optimize it, and evaluate it."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from .config import OPTIMIZE_BY_DEFAULT
from .errors import RPNError
from .evaluator import evaluate
from .infix import compile_infix
from .numerals import parse_numeral
from .optimizer import optimize
from .postfix import compile_postfix
from .values import Value


def _parse_binding(text: str) -> tuple[str, Value]:
    name, sep, literal = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    value = parse_numeral(literal)
    if value is None:
        raise argparse.ArgumentTypeError(f"invalid numeral {literal!r} for {name}")
    return name, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rpn-rat", description=__doc__)
    parser.add_argument("expression", help="expression text (infix unless --rpn)")
    parser.add_argument(
        "bindings",
        nargs="*",
        type=_parse_binding,
        metavar="NAME=VALUE",
        help="variable bindings; values use the numeral syntax (1/3, 0x1f, 2.5e-3, ...)",
    )
    parser.add_argument("--rpn", action="store_true", help="read the expression as postfix tokens")
    parser.add_argument(
        "--optimize",
        action=argparse.BooleanOptionalAction,
        default=OPTIMIZE_BY_DEFAULT,
        help="fold constants and simplify before evaluating",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    bindings = dict(args.bindings)

    try:
        expr = compile_postfix(args.expression) if args.rpn else compile_infix(args.expression)
        if expr.trailing_error is not None:
            print(expr.trailing_error)
        print(expr)
        if args.optimize:
            expr = optimize(expr)
            print(expr)
        result = evaluate(expr, bindings)
    except RPNError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
