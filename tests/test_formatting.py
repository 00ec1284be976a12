from __future__ import annotations

import unittest

from plotxy.formatting import format_si, si_formatter


class TestFormatSi(unittest.TestCase):
    def test_examples(self) -> None:
        self.assertEqual(format_si(1500), "1.50K")
        self.assertEqual(format_si(0), "0")
        self.assertEqual(format_si(0.0025), "2.50m")

    def test_tera_has_no_upper_bound(self) -> None:
        self.assertEqual(format_si(3e15), "3000.00T")
        self.assertEqual(format_si(3e12), "3.00T")

    def test_each_tier(self) -> None:
        cases = {
            2e9: "2.00G",
            4.5e6: "4.50M",
            1000: "1.00K",
            12.3456: "12.35",
            1: "1.00",
            0.5: "500.00m",
            7e-6: "7.00µ",
            3.2e-9: "3.20n",
            1e-12: "1.00p",
        }
        for value, expected in cases.items():
            self.assertEqual(format_si(value), expected, value)

    def test_negative_values_keep_sign(self) -> None:
        self.assertEqual(format_si(-1500), "-1.50K")
        self.assertEqual(format_si(-0.0025), "-2.50m")

    def test_scientific_fallback(self) -> None:
        self.assertEqual(format_si(5e-15), "5.00e-15")

    def test_tick_formatter(self) -> None:
        fmt = si_formatter()
        self.assertEqual(fmt(2.5e6, 0), "2.50M")


if __name__ == "__main__":
    unittest.main()
