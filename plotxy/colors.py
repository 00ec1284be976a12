from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np
import matplotlib.colors as mcolors
from matplotlib import colormaps

from .errors import InvalidColorFormat, InvalidData
from .parsing import Table, column_as_series
from .spec import ColorOptions

_LOGGER = logging.getLogger(__name__)

RGB = Tuple[float, float, float]
RGBA = Tuple[float, float, float, float]

GRADIENT_LOW = "yellow"
GRADIENT_HIGH = "red"


def _build_palette() -> List[RGB]:
    out: List[RGB] = []
    for name in ("tab20", "tab20b", "tab20c"):
        out.extend(tuple(c[:3]) for c in colormaps[name].colors)
    return out


# qualitative palette for facets; index wraps around
PALETTE: List[RGB] = _build_palette()


def decode_hex_color(text: str) -> Tuple[int, int, int]:
    """
    "1E88E5" -> (0x1E, 0x88, 0xE5). Anything that does not decode to exactly
    three bytes is an InvalidColorFormat.
    """
    try:
        raw = bytes.fromhex(text)
    except ValueError as e:
        raise InvalidColorFormat(text, str(e))
    if len(raw) != 3 or len(text) != 6:
        raise InvalidColorFormat(text, f"decoded to {len(raw)} byte(s)")
    return raw[0], raw[1], raw[2]


def palette_pick(index: int) -> RGB:
    return PALETTE[index % len(PALETTE)]


def _with_alpha(rgb: RGB, alpha: float) -> RGBA:
    return (float(rgb[0]), float(rgb[1]), float(rgb[2]), float(alpha))


@dataclass(frozen=True)
class SolidColor:
    rgb: Tuple[int, int, int]
    alpha: float

    def resolve(self, table: Table) -> List[RGBA]:
        c = _with_alpha(tuple(v / 255.0 for v in self.rgb), self.alpha)
        return [c] * table.row_count


@dataclass(frozen=True)
class CategoricalFacet:
    column: int
    alpha: float

    def codes(self, table: Table) -> List[int]:
        """
        One palette index per row. Numbers truncate to an integer index;
        text is coded by the lexical order of its distinct values. Missing,
        negative and non-finite values all take index 0.
        """
        if self.column == 0 or table.column(self.column, "color").is_numeric:
            values = column_as_series(table, self.column, "color")
            out: List[int] = []
            for v in values:
                if not np.isfinite(v) or v < 0:
                    out.append(0)
                else:
                    out.append(int(v))
            return out

        cells = table.column(self.column, "color").cells
        order = {value: code for code, value in enumerate(sorted({c for c in cells if c != ""}))}
        return [order.get(c, 0) for c in cells]

    def resolve(self, table: Table) -> List[RGBA]:
        return [_with_alpha(palette_pick(code), self.alpha) for code in self.codes(table)]


@dataclass(frozen=True)
class ContinuousGradient:
    column: int
    alpha: float

    def domain(self, values: np.ndarray) -> Tuple[float, float]:
        finite = values[np.isfinite(values)]
        if finite.size == 0:
            raise InvalidData(f"gradient column {self.column} has no numeric values")
        return float(np.min(finite)), float(np.max(finite))

    def resolve(self, table: Table) -> List[RGBA]:
        values = column_as_series(table, self.column, "gradient")
        lo, hi = self.domain(values)

        low = np.asarray(mcolors.to_rgb(GRADIENT_LOW), dtype=float)
        high = np.asarray(mcolors.to_rgb(GRADIENT_HIGH), dtype=float)

        span = hi - lo
        if span > 0:
            t = np.clip((values - lo) / span, 0.0, 1.0)
        else:
            # degenerate domain: everything sits on the low stop
            t = np.zeros_like(values)
        # NA rows take the low stop
        t = np.where(np.isfinite(t), t, 0.0)

        rgb = low[None, :] + t[:, None] * (high - low)[None, :]
        return [_with_alpha(tuple(row), self.alpha) for row in rgb]


ColorStrategy = Union[SolidColor, CategoricalFacet, ContinuousGradient]


def select_strategy(options: ColorOptions) -> ColorStrategy:
    """
    Facet column wins over gradient column; neither means the solid plot color.
    """
    if options.facet_column is not None:
        if options.gradient_column is not None:
            _LOGGER.warning(
                "both color facet (%d) and gradient (%d) columns given; using the facet",
                options.facet_column,
                options.gradient_column,
            )
        return CategoricalFacet(column=options.facet_column, alpha=options.alpha)
    if options.gradient_column is not None:
        return ContinuousGradient(column=options.gradient_column, alpha=options.alpha)
    return SolidColor(rgb=decode_hex_color(options.plot_color), alpha=options.alpha)
