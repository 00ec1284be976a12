from __future__ import annotations

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from plotxy.cli import build_parser, main, spec_from_args
from plotxy.spec import Shape


class TestArguments(unittest.TestCase):
    def test_defaults(self) -> None:
        spec = spec_from_args(build_parser().parse_args([])).normalised()
        self.assertIsNone(spec.input.path)
        self.assertEqual(spec.input.delimiter_char(), "\t")
        self.assertEqual((spec.x.column, spec.y.column), (1, 2))
        self.assertIsNone(spec.color.facet_column)
        self.assertIsNone(spec.color.gradient_column)
        self.assertEqual(spec.color.plot_color, "1E88E5")
        self.assertEqual(spec.color.alpha, 0.3)
        self.assertFalse(spec.x.log or spec.y.log)
        self.assertIsNone(spec.x.dim_min)
        self.assertIsNone(spec.y.dim_max)
        self.assertEqual(spec.output_path(), "STDIN.plotxy.png")
        self.assertEqual(spec.style.x_label_area, 70)
        self.assertEqual(spec.style.y_label_area, 100)
        self.assertEqual(spec.shape, Shape.CIRCLE)

    def test_flags(self) -> None:
        args = build_parser().parse_args(
            [
                "runs.csv", "-x", "0", "-y", "3", "-c", "4", "--gradient", "5",
                "-p", "FF0000", "-a", "0.8", "-d", ",", "-H", "-s", "2",
                "--logx", "--logy", "--x-dim-min", "-1.5", "--y-dim-max", "1e6",
                "--svg", "-t", "Latency", "--width", "800", "--height", "600",
                "--xdesc", "run", "--ydesc", "ns", "--point-size", "5",
                "--shape", "column", "--si-format-y",
            ]
        )
        spec = spec_from_args(args).normalised()
        self.assertEqual(spec.input.path, "runs.csv")
        self.assertEqual(spec.x.column, 0)
        self.assertEqual(spec.y.column, 3)
        self.assertEqual(spec.color.facet_column, 4)
        self.assertEqual(spec.color.gradient_column, 5)
        self.assertEqual(spec.color.alpha, 0.8)
        self.assertEqual(spec.input.delimiter_char(), ",")
        self.assertTrue(spec.input.header)
        self.assertEqual(spec.input.skip, 2)
        self.assertTrue(spec.x.log and spec.y.log)
        self.assertEqual(spec.x.dim_min, -1.5)
        self.assertEqual(spec.y.dim_max, 1e6)
        self.assertTrue(spec.y.si_format)
        self.assertFalse(spec.x.si_format)
        self.assertEqual(spec.output_path(), "runs.csv.plotxy.svg")
        self.assertEqual(spec.title(), "Latency")
        self.assertEqual(spec.shape, Shape.COLUMN)
        self.assertEqual(spec.point_size, 5.0)


class TestMain(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = Path(tempfile.mkdtemp(prefix="plotxy_cli_test_"))

    def test_success_prints_output_path(self) -> None:
        src = self.temp_dir / "data.tsv"
        src.write_text("1\t10\n2\t20\n3\t35\n", encoding="utf-8")
        out = self.temp_dir / "plot.png"
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            code = main([str(src), "-o", str(out), "--width", "400", "--height", "300", "-q"])
        self.assertEqual(code, 0)
        self.assertEqual(stdout.getvalue().strip(), str(out))
        self.assertTrue(out.read_bytes().startswith(b"\x89PNG"))

    def test_error_exit_status_and_message(self) -> None:
        src = self.temp_dir / "data.tsv"
        src.write_text("1\t10\n", encoding="utf-8")
        out = self.temp_dir / "plot.png"
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = main([str(src), "-y", "7", "-o", str(out), "-q"])
        self.assertEqual(code, 1)
        self.assertIn("Column index 7", stderr.getvalue())
        self.assertFalse(out.exists())

    def test_value_too_large_to_size_axis(self) -> None:
        src = self.temp_dir / "data.tsv"
        src.write_text("1\t1.7e308\n2\t5\n", encoding="utf-8")
        out = self.temp_dir / "plot.png"
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = main([str(src), "-o", str(out), "-q"])
        self.assertEqual(code, 1)
        self.assertIn("--y-dim-max", stderr.getvalue())
        self.assertFalse(out.exists())

    def test_bad_color(self) -> None:
        src = self.temp_dir / "data.tsv"
        src.write_text("1\t10\n", encoding="utf-8")
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = main([str(src), "-p", "12345", "-o", str(self.temp_dir / "p.png"), "-q"])
        self.assertEqual(code, 1)
        self.assertIn("Invalid color", stderr.getvalue())

    def test_missing_input(self) -> None:
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = main([str(self.temp_dir / "absent.tsv"), "-q"])
        self.assertEqual(code, 1)
        self.assertIn("Could not read", stderr.getvalue())

    def test_usage_error(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                main(["--shape", "star"])
        self.assertEqual(cm.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
