from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np

from .spec import Shape

_LOGGER = logging.getLogger(__name__)

BAR_HALF_WIDTH = 0.4


@dataclass(frozen=True)
class Circle:
    x: float
    y: float
    radius: float  # pixels
    color: tuple
    row: int
    missing: bool = False


@dataclass(frozen=True)
class Bar:
    x0: float
    x1: float
    y0: float
    y1: float
    color: tuple
    row: int
    missing: bool = False


Primitive = Union[Circle, Bar]


def _make(shape: Shape, x: float, y: float, color: tuple, row: int, point_size: float, missing: bool) -> Primitive:
    if shape == Shape.COLUMN:
        # bars always stand on y = 0, whatever the axis minimum
        return Bar(
            x0=x - BAR_HALF_WIDTH,
            x1=x + BAR_HALF_WIDTH,
            y0=0.0,
            y1=y,
            color=color,
            row=row,
            missing=missing,
        )
    return Circle(x=x, y=y, radius=float(point_size), color=color, row=row, missing=missing)


def build_primitives(
    xs: np.ndarray,
    ys: np.ndarray,
    colors: Sequence[tuple],
    shape: Shape = Shape.CIRCLE,
    point_size: float = 3.0,
) -> List[Primitive]:
    """
    One primitive per row. A row with a missing x or y is drawn at the origin
    and reported with a warning; rows are never dropped.
    """
    n = len(ys)
    if len(xs) != n or len(colors) != n:
        raise ValueError(f"row count mismatch: x={len(xs)} y={n} colors={len(colors)}")

    out: List[Primitive] = []
    for i in range(n):
        x = float(xs[i])
        y = float(ys[i])
        if np.isfinite(x) and np.isfinite(y):
            out.append(_make(shape, x, y, colors[i], i, point_size, False))
        else:
            _LOGGER.warning("row %d: NA value, plotted at 0 0", i + 1)
            out.append(_make(shape, 0.0, 0.0, colors[i], i, point_size, True))
    return out


def missing_count(primitives: Sequence[Primitive]) -> int:
    return sum(1 for p in primitives if p.missing)
