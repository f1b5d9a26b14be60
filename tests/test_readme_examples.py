from __future__ import annotations

import contextlib
import io
import unittest
from fractions import Fraction

from rpn_rat import compile_infix, compile_postfix, evaluate, optimize, render
from rpn_rat.cli import main


class ReadmeExamplesTests(unittest.TestCase):
    """Coverage for the README usage and command-line blocks."""

    def test_readme_usage_block(self) -> None:
        cases = [
            (compile_postfix("3 4 +"), None, Fraction(7, 1)),
            (compile_infix("1/2 + 1/3"), None, Fraction(5, 6)),
            (compile_infix("exp(2, -3)"), None, Fraction(1, 8)),
            (compile_infix("x*x + y"), {"x": Fraction(1, 2), "y": 3}, Fraction(13, 4)),
        ]
        for expr, bindings, want in cases:
            with self.subTest(expr=render(expr)):
                got = evaluate(expr, bindings)
                self.assertIsInstance(got, Fraction)
                self.assertEqual(got, want)

        expr = compile_infix("1 * x + 2 * 3")
        self.assertEqual(render(expr), "1 (x) * 2 3 * +")
        self.assertEqual(render(optimize(expr)), "(x) 6 +")

    def test_readme_command_line_block(self) -> None:
        cases = [
            (["--optimize", "1 * x + 2 * 3", "x=1/2"], ["1 (x) * 2 3 * +", "(x) 6 +", "13/2"]),
            (["--optimize", "--rpn", "2 10 1000 EXP"], ["2 10 1000 EXP", "24", "24"]),
        ]
        for argv, want in cases:
            with self.subTest(argv=argv):
                out = io.StringIO()
                with contextlib.redirect_stdout(out):
                    self.assertEqual(main(argv), 0)
                self.assertEqual(out.getvalue().splitlines(), want)


if __name__ == "__main__":
    unittest.main()
