from __future__ import annotations

import math
from typing import List, Tuple

from matplotlib.ticker import FuncFormatter

# (threshold, divisor, suffix); T has no upper bound
_SI_TIERS: List[Tuple[float, float, str]] = [
    (1e12, 1e12, "T"),
    (1e9, 1e9, "G"),
    (1e6, 1e6, "M"),
    (1e3, 1e3, "K"),
    (1.0, 1.0, ""),
    (1e-3, 1e-3, "m"),
    (1e-6, 1e-6, "µ"),
    (1e-9, 1e-9, "n"),
    (1e-12, 1e-12, "p"),
]


def format_si(value: float) -> str:
    """
    Format a number with a metric suffix and two decimals, e.g. 1500 -> "1.50K",
    0.0025 -> "2.50m". Exactly zero is "0"; magnitudes below 1e-12 and
    non-finite values use scientific notation.
    """
    v = float(value)
    if v == 0.0:
        return "0"
    if not math.isfinite(v):
        return f"{v:.2e}"

    mag = abs(v)
    for threshold, divisor, suffix in _SI_TIERS:
        if mag >= threshold:
            return f"{v / divisor:.2f}{suffix}"
    return f"{v:.2e}"


def si_formatter() -> FuncFormatter:
    return FuncFormatter(lambda value, _pos: format_si(value))
