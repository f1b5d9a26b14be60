from __future__ import annotations

import unittest
from fractions import Fraction

from rpn_rat import (
    DivisionByZeroError,
    InternalInvariantError,
    MissingVariableError,
    NoInverseError,
    NotImplementedOperatorError,
    NumericOverflowError,
    TypeMismatchError,
    compile_infix,
    compile_postfix,
    evaluate,
    evaluate_with_errors,
)
from rpn_rat.evaluator import Evaluator, apply_operator
from rpn_rat.expression import CompiledExpression
from rpn_rat.operators import Operator


class RuntimeLanguageSemanticsTests(unittest.TestCase):
    def _rpn(self, source: str, **bindings):
        return evaluate(compile_postfix(source), bindings)

    def _go(self, source: str, **bindings):
        return evaluate(compile_infix(source), bindings)

    def test_documented_examples(self) -> None:
        self.assertEqual(self._rpn("3 4 +"), 7)
        self.assertEqual(self._go("1/2 + 1/3"), Fraction(5, 6))
        self.assertEqual(self._go("exp(2, -3)"), Fraction(1, 8))
        with self.assertRaises(DivisionByZeroError):
            self._rpn("5 0 DIV")

    def test_result_is_always_widened_to_fraction(self) -> None:
        out = self._rpn("3 4 +")
        self.assertIsInstance(out, Fraction)
        self.assertEqual(out.denominator, 1)

    def test_mixed_arithmetic_promotes_and_demotes(self) -> None:
        cases = [
            ("1/2 1/2 +", 1),
            ("1/2 1 +", Fraction(3, 2)),
            ("1 1/2 -", Fraction(1, 2)),
            ("2/3 3 *", 2),
            ("3 2/3 *", 2),
            ("7 2 /", Fraction(7, 2)),
            ("8 2 /", 4),
            ("1/2 1/4 /", 2),
            ("3/4 abs", Fraction(3, 4)),
            ("-3/4 abs", Fraction(3, 4)),
            ("5 neg", -5),
            ("1/2 neg", Fraction(-1, 2)),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(self._rpn(source), expected)

    def test_intermediate_values_never_hold_whole_rationals(self) -> None:
        for source in ("1/2 1/2 +", "2/3 3 *", "1/2 1/4 /", "4 2 FRAC", "1 INV", "-1 INV", "1/3 1/3 + 1/3 +"):
            with self.subTest(source=source):
                expr = compile_postfix(source)
                e = Evaluator(names=expr.names, consts=expr.consts)
                e.run(expr.ops)
                self.assertEqual(len(e.stack), 1)
                self.assertIs(type(e.stack[0]), int)

    def test_integer_only_operators(self) -> None:
        cases = [
            ("12 10 &", 8),
            ("12 10 &^", 4),
            ("12 10 |", 14),
            ("12 10 ^", 6),
            ("0 NOT", -1),
            ("1 4 <<", 16),
            ("-16 2 >>", -4),
            ("12 18 GCD", 6),
            ("-12 18 GCD", 6),
            ("3 11 MODINV", 4),
            ("-3 11 MODINV", 7),
            ("5 2 BINOMIAL", 10),
            ("5 7 BINOMIAL", 0),
            ("5 -1 BINOMIAL", 0),
            ("3 5 MULRANGE", 60),
            ("5 3 MULRANGE", 1),
            ("-2 3 MULRANGE", 0),
            ("-3 -1 MULRANGE", -6),
            ("-4 -1 MULRANGE", 24),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(self._rpn(source), expected)

    def test_division_families(self) -> None:
        cases = [
            ("7 2 DIV", 3),
            ("-7 2 DIV", -4),
            ("7 -2 DIV", -3),
            ("-7 -2 DIV", 4),
            ("7 2 MOD", 1),
            ("-7 2 MOD", 1),
            ("7 -2 MOD", 1),
            ("-7 -2 MOD", 1),
            ("7 2 %", 1),
            ("-7 2 %", -1),
            ("7 -2 REM", 1),
            ("-7 -2 REM", -1),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(self._rpn(source), expected)

    def test_division_by_zero(self) -> None:
        for source in ("5 0 DIV", "5 0 MOD", "5 0 REM", "5 0 /", "1/2 0 /", "0 INV", "1 0 FRAC", "0 -1 _ EXP", "3 0 MODINV"):
            with self.subTest(source=source):
                with self.assertRaises(DivisionByZeroError):
                    self._rpn(source)
        with self.assertRaises(ZeroDivisionError):
            self._rpn("1 0 /")

    def test_modular_inverse_of_non_coprime_operands(self) -> None:
        with self.assertRaises(NoInverseError):
            self._rpn("4 8 MODINV")

    def test_exp_with_and_without_modulus(self) -> None:
        cases = [
            ("2 10 _ EXP", 1024),
            ("2 10 <nil> EXP", 1024),
            ("2 10 1000 EXP", 24),
            ("2 10 -1000 EXP", 24),
            ("2 10 0 EXP", 1024),
            ("-2 3 7 EXP", 6),
            ("2 0 _ EXP", 1),
            ("2 -3 _ EXP", Fraction(1, 8)),
            ("-2 -3 _ EXP", Fraction(-1, 8)),
            ("1 -5 _ EXP", 1),
            ("2 -3 5 EXP", Fraction(1, 8)),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(self._rpn(source), expected)
        self.assertEqual(self._go("exp(3, 4, 5)"), 1)
        self.assertEqual(self._go("exp(3, 4)"), 81)

    def test_rational_accessors_and_rounding(self) -> None:
        cases = [
            ("3/4 DENOM", 4),
            ("5 DENOM", 1),
            ("3/4 NUM", 3),
            ("-3/4 NUM", -3),
            ("5 NUM", 5),
            ("3 4 FRAC", Fraction(3, 4)),
            ("3 -4 FRAC", Fraction(-3, 4)),
            ("8 4 FRAC", 2),
            ("2 INV", Fraction(1, 2)),
            ("-1 INV", -1),
            ("2/3 INV", Fraction(3, 2)),
            ("1/3 INV", 3),
            ("7/2 TRUNC", 3),
            ("-7/2 TRUNC", -3),
            ("7/2 FLOOR", 3),
            ("-7/2 FLOOR", -4),
            ("7/2 CEIL", 4),
            ("-7/2 CEIL", -3),
            ("5 TRUNC", 5),
            ("5 FLOOR", 5),
            ("5 CEIL", 5),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(self._rpn(source), expected)

    def test_type_mismatch_for_integer_only_operators(self) -> None:
        for source in ("1/2 1 &", "1 1/2 |", "1/2 NOT", "1/2 2 DIV", "2 1/2 <<", "1/2 3 GCD", "2 1/2 _ EXP", "2 3 1/2 EXP", "1/2 3 FRAC"):
            with self.subTest(source=source):
                with self.assertRaises(TypeMismatchError) as ctx:
                    self._rpn(source)
                self.assertEqual(ctx.exception.needed, "int")
                self.assertEqual(ctx.exception.found, "rat")

    def test_absent_operand_outside_exp_is_a_type_mismatch(self) -> None:
        for source in ("_ 1 +", "_ NEG", "_ 1 &", "_"):
            with self.subTest(source=source):
                with self.assertRaises(TypeMismatchError):
                    self._rpn(source)

    def test_overflow_bounds(self) -> None:
        limit = 1 << 63
        big = str(limit)
        for source in (f"{big} 1 BINOMIAL", f"1 {big} MULRANGE", f"-{limit + 1} 1 BINOMIAL", f"1 {1 << 64} <<", f"1 {1 << 64} >>", "1 -1 <<"):
            with self.subTest(source=source):
                with self.assertRaises(NumericOverflowError):
                    self._rpn(source)
        self.assertEqual(self._rpn(f"-{big} -{big} MULRANGE"), -(1 << 63))
        self.assertEqual(self._rpn(f"{(1 << 63) - 1} 1 BINOMIAL"), (1 << 63) - 1)

    def test_results_too_large_to_build_overflow(self) -> None:
        sources = [
            "x 18446744073709551615 <<",
            "x 1 << 18446744073709551615 <<",
            "x 9223372036854775807 _ EXP",
            "3 x 1000000000000 * _ EXP",
            "x -9223372036854775807 _ EXP",
            "9223372036854775807 4611686018427387903 BINOMIAL",
            "1 9223372036854775807 MULRANGE",
            "-9223372036854775807 -1 MULRANGE",
        ]
        for source in sources:
            with self.subTest(source=source):
                expr = compile_postfix(source)
                with self.assertRaises(NumericOverflowError):
                    evaluate(expr, {"x": 2})
                value, err = evaluate_with_errors(expr, {"x": 2})
                self.assertIsNone(value)
                self.assertIsInstance(err, NumericOverflowError)

        self.assertEqual(self._rpn("0 18446744073709551615 <<"), 0)
        self.assertEqual(self._rpn("-1 18446744073709551615 >>"), -1)
        self.assertEqual(self._rpn("1 9223372036854775807 _ EXP"), 1)
        self.assertEqual(self._rpn("-1 9223372036854775807 _ EXP"), -1)
        self.assertEqual(self._rpn("3 9223372036854775807 7 EXP"), pow(3, (1 << 63) - 1, 7))
        self.assertEqual(self._rpn("9223372036854775807 9223372036854775806 BINOMIAL"), (1 << 63) - 1)

    def test_missing_and_wrong_kind_bindings(self) -> None:
        expr = compile_infix("x + y")
        self.assertEqual(evaluate(expr, {"x": 1, "y": Fraction(1, 2)}), Fraction(3, 2))
        for bindings in ({"x": 1}, {"x": 1, "y": 2.5}, {"x": 1, "y": "2"}, {"x": 1, "y": None}):
            with self.subTest(bindings=bindings):
                with self.assertRaises(MissingVariableError) as ctx:
                    evaluate(expr, bindings)
                self.assertEqual(ctx.exception.name, "y")

    def test_repeated_evaluation_leaves_pools_and_bindings_untouched(self) -> None:
        expr = compile_postfix("x 3 + NEG 1/2 * x ABS +")
        consts_before = expr.consts
        bindings = {"x": Fraction(-7, 3)}
        first = evaluate(expr, bindings)
        second = evaluate(expr, bindings)
        self.assertEqual(first, second)
        self.assertEqual(bindings, {"x": Fraction(-7, 3)})
        self.assertEqual(expr.consts, consts_before)
        self.assertEqual(expr.consts, (3, Fraction(1, 2)))

    def test_rand_is_reserved(self) -> None:
        with self.assertRaises(NotImplementedOperatorError):
            compile_postfix("3 RAND")
        with self.assertRaises(NotImplementedOperatorError):
            compile_infix("rand(3)")
        with self.assertRaises(NotImplementedOperatorError):
            apply_operator(Operator.RAND, [3])

    def test_malformed_sequences_are_invariant_violations(self) -> None:
        with self.assertRaises(InternalInvariantError):
            evaluate(CompiledExpression(ops=(Operator.ADD,)))
        with self.assertRaises(InternalInvariantError):
            evaluate(CompiledExpression(ops=(Operator.CONST, Operator.CONST), consts=(1, 2)))
        with self.assertRaises(InternalInvariantError):
            evaluate(compile_postfix(""))
        with self.assertRaises(InternalInvariantError):
            evaluate(CompiledExpression(ops=(Operator.CONST,), consts=(1.5,)))

    def test_trailing_stack_expression_evaluates_to_first_value(self) -> None:
        expr = compile_postfix("1 2 3")
        self.assertIsNotNone(expr.trailing_error)
        self.assertEqual(evaluate(expr), 1)

    def test_evaluate_with_errors_pairs(self) -> None:
        out, err = evaluate_with_errors(compile_infix("x * 2"), {"x": 4})
        self.assertEqual(out, 8)
        self.assertIsNone(err)

        out, err = evaluate_with_errors(compile_infix("x * 2"), {})
        self.assertIsNone(out)
        self.assertIsInstance(err, MissingVariableError)

        with self.assertRaises(InternalInvariantError):
            evaluate_with_errors(CompiledExpression(ops=(Operator.NEG,)))

    def test_apply_operator_on_scratch_stack(self) -> None:
        self.assertEqual(apply_operator(Operator.ADD, [1, Fraction(1, 2)]), Fraction(3, 2))
        self.assertEqual(apply_operator(Operator.EXP, [2, 5, None]), 32)
        with self.assertRaises(DivisionByZeroError):
            apply_operator(Operator.QUO, [1, 0])


if __name__ == "__main__":
    unittest.main()
