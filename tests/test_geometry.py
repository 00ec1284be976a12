from __future__ import annotations

import unittest

import numpy as np

from plotxy.geometry import BAR_HALF_WIDTH, Bar, Circle, build_primitives, missing_count
from plotxy.spec import Shape

RED = (1.0, 0.0, 0.0, 1.0)
BLUE = (0.0, 0.0, 1.0, 1.0)


class TestBuildPrimitives(unittest.TestCase):
    def test_circles(self) -> None:
        prims = build_primitives(np.array([1.0, 2.0]), np.array([10.0, 20.0]), [RED, BLUE], Shape.CIRCLE, 4.0)
        self.assertEqual(prims, [
            Circle(x=1.0, y=10.0, radius=4.0, color=RED, row=0),
            Circle(x=2.0, y=20.0, radius=4.0, color=BLUE, row=1),
        ])

    def test_columns_anchor_at_zero(self) -> None:
        prims = build_primitives(np.array([3.0]), np.array([-7.5]), [RED], Shape.COLUMN)
        bar = prims[0]
        self.assertIsInstance(bar, Bar)
        self.assertAlmostEqual(bar.x0, 3.0 - BAR_HALF_WIDTH)
        self.assertAlmostEqual(bar.x1, 3.0 + BAR_HALF_WIDTH)
        self.assertEqual((bar.y0, bar.y1), (0.0, -7.5))

    def test_missing_values_collapse_to_origin(self) -> None:
        xs = np.array([1.0, np.nan, 3.0, 4.0])
        ys = np.array([10.0, 20.0, np.nan, 40.0])
        with self.assertLogs("plotxy.geometry", level="WARNING") as cm:
            prims = build_primitives(xs, ys, [RED] * 4, Shape.CIRCLE)
        self.assertEqual(len(prims), 4)
        self.assertEqual(len(cm.records), 2)
        self.assertIn("row 2", cm.output[0])
        self.assertIn("row 3", cm.output[1])
        self.assertEqual((prims[1].x, prims[1].y), (0.0, 0.0))
        self.assertEqual((prims[2].x, prims[2].y), (0.0, 0.0))
        self.assertTrue(prims[1].missing)
        self.assertFalse(prims[3].missing)
        self.assertEqual(missing_count(prims), 2)

    def test_missing_column_collapses_at_origin(self) -> None:
        with self.assertLogs("plotxy.geometry", level="WARNING"):
            prims = build_primitives(np.array([np.nan]), np.array([5.0]), [RED], Shape.COLUMN)
        bar = prims[0]
        self.assertAlmostEqual(bar.x0, -BAR_HALF_WIDTH)
        self.assertAlmostEqual(bar.x1, BAR_HALF_WIDTH)
        self.assertEqual((bar.y0, bar.y1), (0.0, 0.0))

    def test_row_count_preserved(self) -> None:
        rng = np.random.default_rng(3)
        for n in (0, 1, 17, 200):
            xs = rng.normal(size=n)
            ys = rng.normal(size=n)
            ys[::3] = np.nan
            prims = build_primitives(xs, ys, [RED] * n)
            self.assertEqual(len(prims), n)
            self.assertEqual([p.row for p in prims], list(range(n)))

    def test_length_mismatch(self) -> None:
        with self.assertRaises(ValueError):
            build_primitives(np.array([1.0]), np.array([1.0, 2.0]), [RED, RED])


if __name__ == "__main__":
    unittest.main()
