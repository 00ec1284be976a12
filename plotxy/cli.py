from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .builder import plot_file
from .errors import PlotxyError
from .spec import (
    DEFAULT_PLOT_COLOR,
    AxisSpec,
    ColorOptions,
    InputSpec,
    PlotSpec,
    Shape,
    StyleSpec,
)

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="plotxy", description="Plots tabular data")
    p.add_argument("input", nargs="?", default=None, help="file with one entry per line (default: STDIN)")

    data = p.add_argument_group("data")
    data.add_argument("-x", "--x", type=int, default=1, help="column index to be used as X, 0 = row index (default: 1)")
    data.add_argument("-y", "--y", type=int, default=2, help="column index to be used as Y (default: 2)")
    data.add_argument("-d", "--delimiter", default=r"\t", help=r"column delimiter (default: \t)")
    data.add_argument("-H", "--header", action="store_true", help="input has header line (see also --skip)")
    data.add_argument("-s", "--skip", type=int, default=0, help="skip lines before header")

    color = p.add_argument_group("color")
    color.add_argument("-c", "--color", type=int, default=None, help="column index to be used as color facet")
    color.add_argument("--gradient", type=int, default=None, help="column index to be used as color gradient")
    color.add_argument("-p", "--plot-color", default=DEFAULT_PLOT_COLOR, help=f"default plot color (default: {DEFAULT_PLOT_COLOR})")
    color.add_argument("-a", "--alpha", type=float, default=0.3, help="transparency channel (default: 0.3)")

    axes = p.add_argument_group("axes")
    axes.add_argument("--logx", action="store_true", help="plot logarithmic X-axis")
    axes.add_argument("--logy", action="store_true", help="plot logarithmic Y-axis")
    axes.add_argument("--x-dim-min", type=float, default=None, help="minimum X dimension (default: 0.0)")
    axes.add_argument("--x-dim-max", type=float, default=None, help="maximum X dimension (default: next decade step above max X)")
    axes.add_argument("--y-dim-min", type=float, default=None, help="minimum Y dimension (default: 0.0)")
    axes.add_argument("--y-dim-max", type=float, default=None, help="maximum Y dimension (default: next decade step above max Y)")
    axes.add_argument("--si-format-x", action="store_true", help="SI suffixes on X tick labels")
    axes.add_argument("--si-format-y", action="store_true", help="SI suffixes on Y tick labels")

    out = p.add_argument_group("output")
    out.add_argument("-o", "--outfile", default=None, help="file to save plot to (default: <input>.plotxy.png|svg)")
    out.add_argument("--svg", action="store_true", help="write SVG instead of PNG")
    out.add_argument("-t", "--title", default=None, help="title above the plot (default: output filename)")
    out.add_argument("--width", type=int, default=2560, help="image width (default: 2560)")
    out.add_argument("--height", type=int, default=1200, help="image height (default: 1200)")
    out.add_argument("--xdesc", default="X", help="x-axis label (default: X)")
    out.add_argument("--ydesc", default="Y", help="y-axis label (default: Y)")
    out.add_argument("--xdesc-area", type=int, default=70, help="x-axis label area size (default: 70)")
    out.add_argument("--ydesc-area", type=int, default=100, help="y-axis label area size (default: 100)")
    out.add_argument("--point-size", type=float, default=3.0, help="marker radius in pixels (default: 3)")
    out.add_argument("--shape", choices=[s.value for s in Shape], default=Shape.CIRCLE.value, help="marker shape")

    fonts = p.add_argument_group("fonts")
    fonts.add_argument("--font", default="sans-serif", help="font family for all text (default: sans-serif)")
    fonts.add_argument("--title-font-size", type=int, default=20)
    fonts.add_argument("--label-font-size", type=int, default=24, help="tick label font size")
    fonts.add_argument("--axis-desc-font-size", type=int, default=22, help="axis description font size")

    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only log errors")
    return p


def spec_from_args(args: argparse.Namespace) -> PlotSpec:
    return PlotSpec(
        input=InputSpec(
            path=args.input,
            delimiter=args.delimiter,
            header=args.header,
            skip=args.skip,
        ),
        x=AxisSpec(
            column=args.x,
            dim_min=args.x_dim_min,
            dim_max=args.x_dim_max,
            log=args.logx,
            si_format=args.si_format_x,
            description=args.xdesc,
        ),
        y=AxisSpec(
            column=args.y,
            dim_min=args.y_dim_min,
            dim_max=args.y_dim_max,
            log=args.logy,
            si_format=args.si_format_y,
            description=args.ydesc,
        ),
        color=ColorOptions(
            facet_column=args.color,
            gradient_column=args.gradient,
            plot_color=args.plot_color,
            alpha=args.alpha,
        ),
        style=StyleSpec(
            title=args.title or "",
            font_family=args.font,
            title_font_size=args.title_font_size,
            label_font_size=args.label_font_size,
            axis_desc_font_size=args.axis_desc_font_size,
            x_label_area=args.xdesc_area,
            y_label_area=args.ydesc_area,
        ),
        shape=Shape(args.shape),
        point_size=args.point_size,
        svg=args.svg,
        outfile=args.outfile,
        width=args.width,
        height=args.height,
    )


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else (logging.ERROR if quiet else logging.WARNING)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        path = plot_file(spec_from_args(args))
    except PlotxyError as e:
        _LOGGER.debug("aborted", exc_info=True)
        print(f"plotxy: error: {e}", file=sys.stderr)
        return 1

    print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
