from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .errors import InvalidData
from .parsing import observed_max, observed_min_positive
from .spec import AxisSpec

_LOGGER = logging.getLogger(__name__)


class ScaleMode(str, Enum):
    LINEAR = "linear"
    LOG = "log"

    @classmethod
    def from_flag(cls, log: bool) -> ScaleMode:
        return cls.LOG if log else cls.LINEAR


@dataclass(frozen=True)
class AxisDomain:
    min: float
    max: float
    scale: ScaleMode = ScaleMode.LINEAR


@dataclass(frozen=True)
class CoordinateSystem:
    x: AxisDomain
    y: AxisDomain

    @property
    def scales(self) -> Tuple[ScaleMode, ScaleMode]:
        return self.x.scale, self.y.scale


def _step(k: int) -> float:
    try:
        return 10.0 ** (k / 10.0)
    except OverflowError:
        return math.inf


def next_decade(x: float) -> float:
    """
    Smallest 10^(k/10), k integer, that is >= x. Only defined for x > 0
    and below the largest representable step.
    """
    if not x > 0 or not math.isfinite(x):
        raise ValueError(f"next_decade is undefined for {x!r}")
    # log10 is only a first guess; the comparisons settle k exactly
    k = math.ceil(math.log10(x) * 10.0)
    while _step(k) < x:
        k += 1
    while _step(k - 1) >= x:
        k -= 1
    result = _step(k)
    if not math.isfinite(result):
        raise ValueError(f"no decade step at or above {x!r} is representable")
    return result


def previous_decade(x: float) -> float:
    """Largest 10^(k/10), k integer, that is <= x. Only defined for x > 0."""
    if not x > 0 or not math.isfinite(x):
        raise ValueError(f"previous_decade is undefined for {x!r}")
    k = math.floor(math.log10(x) * 10.0)
    while _step(k) > x:
        k -= 1
    while _step(k + 1) <= x:
        k += 1
    return _step(k)


def resolve_range(
    explicit_min: Optional[float],
    explicit_max: Optional[float],
    observed: float,
    axis: str = "",
) -> Tuple[float, float]:
    """
    Explicit bounds win. The minimum defaults to 0; the maximum defaults to
    next_decade(observed), which needs a positive observed maximum.
    """
    lo = 0.0 if explicit_min is None else float(explicit_min)
    if explicit_max is not None:
        return lo, float(explicit_max)

    name = axis.lower() or "axis"
    if not math.isfinite(observed) or observed <= 0:
        raise InvalidData(
            f"Cannot size {axis or 'axis'} automatically: maximum observed value is {observed}; "
            f"pass --{name}-dim-max"
        )
    try:
        return lo, next_decade(observed)
    except ValueError:
        raise InvalidData(
            f"Cannot size {axis or 'axis'} automatically: maximum observed value {observed} "
            f"has no representable decade step above it; pass --{name}-dim-max"
        )


def plan_axis(spec: AxisSpec, series: np.ndarray, axis: str) -> AxisDomain:
    scale = ScaleMode.from_flag(spec.log)
    lo, hi = resolve_range(spec.dim_min, spec.dim_max, observed_max(series), axis)

    if scale == ScaleMode.LOG and lo <= 0:
        if spec.dim_min is not None:
            raise InvalidData(
                f"{axis} axis is logarithmic but its minimum is {lo}; pass a positive --{axis.lower()}-dim-min"
            )
        smallest = observed_min_positive(series)
        if math.isnan(smallest):
            raise InvalidData(f"{axis} axis is logarithmic but the column has no positive values")
        lo = previous_decade(smallest)
        if lo >= hi:
            lo = hi / 10.0 ** 0.1
        _LOGGER.debug("%s log axis minimum defaulted to %g", axis, lo)

    if not lo < hi:
        raise InvalidData(f"{axis} axis range is empty: min {lo} is not below max {hi}")

    return AxisDomain(min=lo, max=hi, scale=scale)
