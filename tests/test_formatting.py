import unittest
from decimal import Decimal

from domain.formatting import (
    format_amount,
    format_profit_loss,
    is_valid_amount,
    parse_amount,
    profit_loss_status,
)


class ParseAmountTests(unittest.TestCase):
    def test_plain_numbers(self):
        self.assertEqual(parse_amount("100"), Decimal("100"))
        self.assertEqual(parse_amount("12.5"), Decimal("12.5"))
        self.assertEqual(parse_amount(".5"), Decimal("0.5"))
        self.assertEqual(parse_amount("  -3.25 "), Decimal("-3.25"))
        self.assertEqual(parse_amount("1e2"), Decimal("100"))

    def test_numeric_types_pass_through(self):
        self.assertEqual(parse_amount(7), Decimal("7"))
        self.assertEqual(parse_amount(0.1), Decimal("0.1"))
        self.assertEqual(parse_amount(Decimal("2.50")), Decimal("2.50"))

    def test_junk_becomes_zero(self):
        for raw in (None, "", "   ", "not-a-number", "abc12", "NaN", "Infinity", True, [], {}):
            with self.subTest(raw=raw):
                self.assertEqual(parse_amount(raw), Decimal("0"))

    def test_non_finite_numbers_become_zero(self):
        self.assertEqual(parse_amount(float("nan")), 0)
        self.assertEqual(parse_amount(float("inf")), 0)
        self.assertEqual(parse_amount(Decimal("Infinity")), 0)

    def test_trailing_junk_is_ignored(self):
        self.assertEqual(parse_amount("40chips"), Decimal("40"))
        self.assertEqual(parse_amount("12.5.6"), Decimal("12.5"))

    def test_out_of_range_magnitudes_become_zero(self):
        self.assertEqual(parse_amount("1e15"), Decimal("1e15"))
        self.assertEqual(parse_amount("-1e15"), Decimal("-1e15"))
        for raw in ("1e16", "1e30", "-1e400", "1e1000000", Decimal("1e1000000"), 1e300):
            with self.subTest(raw=raw):
                self.assertEqual(parse_amount(raw), Decimal("0"))
                self.assertFalse(is_valid_amount(raw))


class IsValidAmountTests(unittest.TestCase):
    def test_valid(self):
        for raw in ("0", "100", "0.01", 5, "40chips"):
            with self.subTest(raw=raw):
                self.assertTrue(is_valid_amount(raw))

    def test_invalid(self):
        for raw in (None, "", "abc", "-1", -0.5):
            with self.subTest(raw=raw):
                self.assertFalse(is_valid_amount(raw))


class FormatProfitLossTests(unittest.TestCase):
    def test_literals(self):
        cases = [
            (Decimal("150"), "+150.00"),
            (Decimal("-60"), "-60.00"),
            (Decimal("0"), "0.00"),
            (Decimal("1"), "+1.00"),
            (Decimal("12.345"), "+12.35"),
            (Decimal("-12.345"), "-12.35"),
            (Decimal("0.004"), "0.00"),
            (Decimal("-0.004"), "0.00"),
            (2.675, "+2.68"),
            (-7, "-7.00"),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(format_profit_loss(value), expected)

    def test_status(self):
        self.assertEqual(profit_loss_status(Decimal("0.5")), "positive")
        self.assertEqual(profit_loss_status(Decimal("-0.5")), "negative")
        self.assertEqual(profit_loss_status(Decimal("0")), "zero")
        self.assertEqual(profit_loss_status(Decimal("-0.001")), "zero")

    def test_format_amount(self):
        self.assertEqual(format_amount(Decimal("100")), "100.00")
        self.assertEqual(format_amount(Decimal("-5.5")), "-5.50")
        self.assertEqual(format_amount(Decimal("0")), "0.00")

    def test_large_magnitudes_do_not_trap(self):
        self.assertEqual(
            format_profit_loss(Decimal("1e30")),
            "+1000000000000000000000000000000.00",
        )
        self.assertEqual(
            format_profit_loss(Decimal("-123456789012345678901234567890.555")),
            "-123456789012345678901234567890.56",
        )
        self.assertEqual(format_amount(Decimal("3e15")), "3000000000000000.00")
        self.assertEqual(profit_loss_status(Decimal("-1e40")), "negative")
        self.assertEqual(format_amount(Decimal("1e2000")), "1E+2000")


if __name__ == "__main__":
    unittest.main()
