from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import OptionError

STDIN_NAME = "STDIN"
DEFAULT_PLOT_COLOR = "1E88E5"


class Shape(str, Enum):
    CIRCLE = "circle"
    COLUMN = "column"


class OutputFormat(str, Enum):
    PNG = "png"
    SVG = "svg"


@dataclass(frozen=True)
class InputSpec:
    # None means standard input
    path: Optional[str] = None
    delimiter: str = r"\t"
    header: bool = False
    skip: int = 0

    @property
    def name(self) -> str:
        if not self.path:
            return STDIN_NAME
        return Path(self.path).name or STDIN_NAME

    def delimiter_char(self) -> str:
        """
        The literal two-character token "\\t" means a tab; anything else
        contributes the first byte of its UTF-8 encoding. That byte must be
        ASCII: the lead byte of a multi-byte character never matches a whole
        character of the decoded input.
        """
        if self.delimiter == r"\t":
            return "\t"
        raw = self.delimiter.encode("utf-8")
        if not raw:
            raise OptionError("Not a valid delimiter: empty string")
        if raw[0] >= 0x80:
            raise OptionError(f"Not a valid delimiter: {self.delimiter!r} does not start with an ASCII character")
        return chr(raw[0])


@dataclass(frozen=True)
class AxisSpec:
    # 1-based column, 0 = row index
    column: int = 1
    dim_min: Optional[float] = None
    dim_max: Optional[float] = None
    log: bool = False
    si_format: bool = False
    description: str = ""


@dataclass(frozen=True)
class ColorOptions:
    facet_column: Optional[int] = None
    gradient_column: Optional[int] = None
    plot_color: str = DEFAULT_PLOT_COLOR
    alpha: float = 0.3


@dataclass(frozen=True)
class StyleSpec:
    title: str = ""
    font_family: str = "sans-serif"

    title_font_size: int = 20
    label_font_size: int = 24
    axis_desc_font_size: int = 22

    # pixels reserved for tick labels + description
    x_label_area: int = 70
    y_label_area: int = 100
    margin: int = 26


@dataclass(frozen=True)
class PlotSpec:
    input: InputSpec = field(default_factory=InputSpec)
    x: AxisSpec = field(default_factory=lambda: AxisSpec(column=1, description="X"))
    y: AxisSpec = field(default_factory=lambda: AxisSpec(column=2, description="Y"))
    color: ColorOptions = field(default_factory=ColorOptions)
    style: StyleSpec = field(default_factory=StyleSpec)

    shape: Shape = Shape.CIRCLE
    point_size: float = 3.0
    svg: bool = False
    outfile: Optional[str] = None
    width: int = 2560
    height: int = 1200

    @property
    def output_format(self) -> OutputFormat:
        return OutputFormat.SVG if self.svg else OutputFormat.PNG

    def output_path(self) -> str:
        """Explicit outfile, else <input-name>.plotxy.<ext> in the working directory."""
        if self.outfile:
            return self.outfile
        return f"{self.input.name}.plotxy.{self.output_format.value}"

    def title(self) -> str:
        return self.style.title or self.output_path()

    def normalised(self) -> PlotSpec:
        if not 0.0 <= float(self.color.alpha) <= 1.0:
            raise OptionError(f"alpha must be within [0, 1], got {self.color.alpha}")
        if self.width <= 0 or self.height <= 0:
            raise OptionError(f"canvas size must be positive, got {self.width}x{self.height}")
        if self.point_size <= 0:
            raise OptionError(f"point size must be positive, got {self.point_size}")
        if self.input.skip < 0:
            raise OptionError(f"skip must be >= 0, got {self.input.skip}")
        for name, col in (
            ("x", self.x.column),
            ("y", self.y.column),
            ("color", self.color.facet_column),
            ("gradient", self.color.gradient_column),
        ):
            if col is not None and col < 0:
                raise OptionError(f"{name} column must be >= 0, got {col}")

        # raises on an empty delimiter
        self.input.delimiter_char()

        try:
            shape = Shape(self.shape)
        except ValueError:
            raise OptionError(
                f"Unknown shape {self.shape!r}; expected one of: {', '.join(s.value for s in Shape)}"
            )

        # blank descriptions fall back to the axis name
        x = self.x if self.x.description else replace(self.x, description="X")
        y = self.y if self.y.description else replace(self.y, description="Y")

        return replace(self, x=x, y=y, shape=shape)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["shape"] = Shape(self.shape).value
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> PlotSpec:
        input_d = d.get("input", {}) or {}
        x_d = d.get("x", {}) or {}
        y_d = d.get("y", {}) or {}
        color_d = d.get("color", {}) or {}
        style_d = d.get("style", {}) or {}

        def _opt_float(v: Any) -> Optional[float]:
            return None if v in (None, "") else float(v)

        def _opt_int(v: Any) -> Optional[int]:
            return None if v in (None, "") else int(v)

        def _axis(ad: Dict[str, Any], column: int, desc: str) -> AxisSpec:
            return AxisSpec(
                column=int(ad.get("column", column)),
                dim_min=_opt_float(ad.get("dim_min")),
                dim_max=_opt_float(ad.get("dim_max")),
                log=bool(ad.get("log", False)),
                si_format=bool(ad.get("si_format", False)),
                description=str(ad.get("description", desc)),
            )

        try:
            spec = PlotSpec(
                input=InputSpec(
                    path=(str(input_d["path"]) if input_d.get("path") else None),
                    delimiter=str(input_d.get("delimiter", r"\t")),
                    header=bool(input_d.get("header", False)),
                    skip=int(input_d.get("skip", 0)),
                ),
                x=_axis(x_d, 1, "X"),
                y=_axis(y_d, 2, "Y"),
                color=ColorOptions(
                    facet_column=_opt_int(color_d.get("facet_column")),
                    gradient_column=_opt_int(color_d.get("gradient_column")),
                    plot_color=str(color_d.get("plot_color", DEFAULT_PLOT_COLOR)),
                    alpha=float(color_d.get("alpha", 0.3)),
                ),
                style=StyleSpec(
                    title=str(style_d.get("title", "")),
                    font_family=str(style_d.get("font_family", "sans-serif")) or "sans-serif",
                    title_font_size=int(style_d.get("title_font_size", 20)),
                    label_font_size=int(style_d.get("label_font_size", 24)),
                    axis_desc_font_size=int(style_d.get("axis_desc_font_size", 22)),
                    x_label_area=int(style_d.get("x_label_area", 70)),
                    y_label_area=int(style_d.get("y_label_area", 100)),
                    margin=int(style_d.get("margin", 26)),
                ),
                shape=str(d.get("shape", Shape.CIRCLE.value)),
                point_size=float(d.get("point_size", 3.0)),
                svg=bool(d.get("svg", False)),
                outfile=(str(d["outfile"]) if d.get("outfile") else None),
                width=int(d.get("width", 2560)),
                height=int(d.get("height", 1200)),
            )
        except (TypeError, ValueError) as e:
            raise OptionError(f"Invalid options: {e}")

        return spec.normalised()
