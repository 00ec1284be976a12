from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .axes import CoordinateSystem, plan_axis
from .colors import ColorStrategy, select_strategy
from .errors import InvalidData
from .geometry import Primitive, build_primitives, missing_count
from .parsing import Table, column_as_series, parse_table, read_input
from .render import Cosmetics, Renderer, renderer_for, write_output
from .spec import PlotSpec

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlotModel:
    coords: CoordinateSystem
    cosmetics: Cosmetics
    primitives: List[Primitive]
    strategy: ColorStrategy

    @property
    def missing(self) -> int:
        return missing_count(self.primitives)


def build_plot(table: Table, spec: PlotSpec) -> PlotModel:
    """
    Map a table onto drawable geometry: resolve the X/Y columns, pick the
    color strategy, size both axes and emit one primitive per row.

    `spec` is expected to be normalised already; render_table and plot_file
    take care of that.
    """
    xs = column_as_series(table, spec.x.column, "X")
    ys = column_as_series(table, spec.y.column, "Y")

    strategy = select_strategy(spec.color)
    colors = strategy.resolve(table)

    n = table.row_count
    if not (len(xs) == len(ys) == len(colors) == n):
        raise InvalidData(
            f"row count mismatch: expected {n}, got x={len(xs)} y={len(ys)} colors={len(colors)}"
        )

    coords = CoordinateSystem(
        x=plan_axis(spec.x, xs, "X"),
        y=plan_axis(spec.y, ys, "Y"),
    )
    _LOGGER.debug(
        "axes: x=[%g, %g) %s, y=[%g, %g) %s; colors: %s",
        coords.x.min, coords.x.max, coords.x.scale.value,
        coords.y.min, coords.y.max, coords.y.scale.value,
        type(strategy).__name__,
    )

    primitives = build_primitives(xs, ys, colors, spec.shape, spec.point_size)
    return PlotModel(
        coords=coords,
        cosmetics=Cosmetics.from_spec(spec),
        primitives=primitives,
        strategy=strategy,
    )


def render_table(table: Table, spec: PlotSpec, renderer: Optional[Renderer] = None) -> tuple[bytes, PlotModel]:
    return _render(table, spec.normalised(), renderer)


def _render(table: Table, spec: PlotSpec, renderer: Optional[Renderer]) -> tuple[bytes, PlotModel]:
    model = build_plot(table, spec)
    renderer = renderer or renderer_for(spec.output_format)
    payload = renderer.draw(model.primitives, model.coords, model.cosmetics)
    return payload, model


def plot_file(spec: PlotSpec, renderer: Optional[Renderer] = None) -> str:
    """
    Full run: read the input, build and render the plot, write the output.
    Returns the path written.
    """
    spec = spec.normalised()
    data = read_input(spec.input.path)
    table = parse_table(
        data,
        delimiter=spec.input.delimiter_char(),
        header=spec.input.header,
        skip=spec.input.skip,
    )
    payload, model = _render(table, spec, renderer)
    if model.missing:
        _LOGGER.info("%d of %d rows had NA values", model.missing, len(model.primitives))
    return write_output(spec.output_path(), payload)
