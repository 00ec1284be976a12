from __future__ import annotations

import io
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import matplotlib
matplotlib.use("Agg")  # must come before Figure import

from matplotlib import rc_context
from matplotlib.figure import Figure

from .axes import AxisDomain, CoordinateSystem, ScaleMode
from .errors import IoError, RenderError
from .formatting import si_formatter
from .geometry import Bar, Circle, Primitive
from .spec import OutputFormat, PlotSpec

_LOGGER = logging.getLogger(__name__)

# one inch per hundred pixels keeps the canvas at exactly width x height
_DPI = 100
_GRID_COLOR = "0.85"


@dataclass(frozen=True)
class Cosmetics:
    title: str
    x_desc: str
    y_desc: str
    si_x: bool = False
    si_y: bool = False

    font_family: str = "sans-serif"
    title_font_size: int = 20
    label_font_size: int = 24
    axis_desc_font_size: int = 22

    x_label_area: int = 70
    y_label_area: int = 100
    margin: int = 26

    width: int = 2560
    height: int = 1200

    @staticmethod
    def from_spec(spec: PlotSpec) -> Cosmetics:
        st = spec.style
        return Cosmetics(
            title=spec.title(),
            x_desc=spec.x.description,
            y_desc=spec.y.description,
            si_x=spec.x.si_format,
            si_y=spec.y.si_format,
            font_family=st.font_family,
            title_font_size=st.title_font_size,
            label_font_size=st.label_font_size,
            axis_desc_font_size=st.axis_desc_font_size,
            x_label_area=st.x_label_area,
            y_label_area=st.y_label_area,
            margin=st.margin,
            width=spec.width,
            height=spec.height,
        )


class Renderer(Protocol):
    fmt: OutputFormat

    def draw(self, primitives: Sequence[Primitive], coords: CoordinateSystem, cosmetics: Cosmetics) -> bytes:
        ...


def _axes_rect(c: Cosmetics) -> List[float]:
    """Plot area in figure fractions after reserving margin, title and label areas."""
    w, h = float(c.width), float(c.height)
    title_area = 2.0 * c.title_font_size if c.title else 0.0
    left = c.margin + c.y_label_area
    bottom = c.margin + c.x_label_area
    right = c.margin
    top = c.margin + title_area

    pw = max(1.0, w - left - right)
    ph = max(1.0, h - bottom - top)
    return [min(left, w - 1.0) / w, min(bottom, h - 1.0) / h, pw / w, ph / h]


def _configure_axis(axis, set_scale, set_lim, domain: AxisDomain, si: bool) -> None:
    if domain.scale == ScaleMode.LOG:
        set_scale("log", nonpositive="clip")
    else:
        set_scale("linear")
    set_lim(domain.min, domain.max)
    if si:
        axis.set_major_formatter(si_formatter())


def apply_mesh(ax, coords: CoordinateSystem, c: Cosmetics) -> None:
    """
    Axis scales, limits and the cosmetic layer. All four scale combinations
    go through this one function.
    """
    _configure_axis(ax.xaxis, ax.set_xscale, ax.set_xlim, coords.x, c.si_x)
    _configure_axis(ax.yaxis, ax.set_yscale, ax.set_ylim, coords.y, c.si_y)

    ax.set_axisbelow(True)
    ax.grid(False, axis="x", which="both")
    ax.grid(True, axis="y", which="major", color=_GRID_COLOR, linewidth=1.0)

    ax.set_xlabel(c.x_desc, fontsize=c.axis_desc_font_size, fontfamily=c.font_family)
    ax.set_ylabel(c.y_desc, fontsize=c.axis_desc_font_size, fontfamily=c.font_family)
    ax.tick_params(labelsize=c.label_font_size)


def draw_on_axes(ax, primitives: Sequence[Primitive], coords: CoordinateSystem, c: Cosmetics) -> None:
    circles = [p for p in primitives if isinstance(p, Circle)]
    bars = [p for p in primitives if isinstance(p, Bar)]

    if bars:
        ax.bar(
            [b.x0 for b in bars],
            [b.y1 - b.y0 for b in bars],
            width=[b.x1 - b.x0 for b in bars],
            bottom=[b.y0 for b in bars],
            align="edge",
            color=[b.color for b in bars],
            linewidth=0,
        )

    if circles:
        # marker area is in points^2; radius is in pixels
        sizes = [(2.0 * p.radius * 72.0 / _DPI) ** 2 for p in circles]
        ax.scatter(
            [p.x for p in circles],
            [p.y for p in circles],
            s=sizes,
            c=[p.color for p in circles],
            marker="o",
            linewidths=0,
        )

    apply_mesh(ax, coords, c)


class MatplotlibRenderer:
    fmt: OutputFormat = OutputFormat.PNG

    def _save_kwargs(self) -> Dict[str, Any]:
        return {"format": self.fmt.value, "dpi": _DPI}

    def draw(self, primitives: Sequence[Primitive], coords: CoordinateSystem, cosmetics: Cosmetics) -> bytes:
        fig = Figure(figsize=(cosmetics.width / _DPI, cosmetics.height / _DPI), dpi=_DPI, facecolor="white")
        try:
            with rc_context({"font.family": cosmetics.font_family}):
                if cosmetics.title:
                    fig.suptitle(
                        cosmetics.title,
                        fontsize=cosmetics.title_font_size,
                        y=1.0 - (cosmetics.margin / 2.0) / cosmetics.height,
                        va="top",
                    )
                ax = fig.add_axes(_axes_rect(cosmetics))
                draw_on_axes(ax, primitives, coords, cosmetics)

                buf = io.BytesIO()
                fig.savefig(buf, **self._save_kwargs())
            payload = buf.getvalue()
        except (ValueError, RuntimeError, OverflowError) as e:
            raise RenderError(f"Render failed: {type(e).__name__}: {e}")
        finally:
            fig.clear()

        _LOGGER.debug("rendered %d primitives as %s (%d bytes)", len(primitives), self.fmt.value, len(payload))
        return payload


class RasterRenderer(MatplotlibRenderer):
    fmt = OutputFormat.PNG


class VectorRenderer(MatplotlibRenderer):
    fmt = OutputFormat.SVG


def renderer_for(fmt: OutputFormat) -> MatplotlibRenderer:
    return VectorRenderer() if fmt == OutputFormat.SVG else RasterRenderer()


MIME_TYPES = {
    OutputFormat.PNG: "image/png",
    OutputFormat.SVG: "image/svg+xml",
}


def write_output(path: str, payload: bytes) -> str:
    """
    Write via a temporary file in the target directory and rename it into
    place, so a failed run leaves no partial output behind.
    """
    target = Path(path).expanduser()
    directory = target.parent if str(target.parent) else Path(".")
    tmp_name: Optional[str] = None
    try:
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".plotxy-", suffix=target.suffix)
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)
        # mkstemp creates 0600; give the result the usual umask-derived mode
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_name, 0o666 & ~umask)
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        raise IoError(f"Could not write {target}: {e.strerror or e}")
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    return str(target)
