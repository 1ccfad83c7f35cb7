"""SVG rendering of a polygon triangulation.

Draws each triangle as a filled patch and the polygon boundary as thick
black segments. Coordinates are scaled so the drawing is ``width`` pixels
wide; the y axis points down, as in SVG user space.
"""

from __future__ import annotations

import io
import logging
import math
import re
from pathlib import Path

import numpy as np
from matplotlib.collections import LineCollection
from matplotlib.figure import Figure
from matplotlib.patches import Polygon

logger = logging.getLogger(__name__)

# 10 fill colors; each triangle draws one from the seeded RNG
TRIANGLE_COLORS: list[str] = [
    "orange",
    "brown",
    "purple",
    "blue",
    "darksalmon",
    "yellow",
    "green",
    "red",
    "lime",
    "aqua",
]

# SVG output is laid out at 72 user units per inch
_DPI: int = 72
_TRIANGLE_STROKE: float = 0.3
_BOUNDARY_STROKE: float = 2.0

_SVG_ROOT = re.compile(r"<svg\b[^>]*>")
_PT_LENGTH = re.compile(r'\b(width|height)="([0-9.]+)pt"')


def build_figure(
    points: np.ndarray,
    triangles: np.ndarray,
    *,
    width: int = 1600,
    seed: int = 0,
) -> Figure:
    """Build a matplotlib figure showing *triangles* over *points*.

    Args:
        points: Vertex array of shape (N, 2).
        triangles: Vertex index triples of shape (M, 3).
        width: Output width in pixels.
        seed: Seed for the triangle fill color sequence.

    Returns:
        Figure sized ``width`` x ``height`` pixels, where height follows the
        aspect ratio of the point set's bounding box.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    tris = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)

    if len(pts):
        min_xy = pts.min(axis=0)
        extent = pts.max(axis=0) - min_xy
    else:
        min_xy = np.zeros(2)
        extent = np.zeros(2)
    span_x = extent[0] if extent[0] > 0 else 1.0
    scale = width / span_x
    height = max(1, math.ceil(scale * extent[1]))

    fig = Figure(figsize=(width / _DPI, height / _DPI), dpi=_DPI)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_axis_off()
    ax.set_xlim(0.0, width)
    ax.set_ylim(height, 0.0)

    scaled = (pts - min_xy) * scale
    rng = np.random.default_rng(seed)
    for tri in tris:
        color = TRIANGLE_COLORS[int(rng.integers(len(TRIANGLE_COLORS)))]
        ax.add_patch(
            Polygon(
                scaled[tri],
                closed=True,
                facecolor=color,
                edgecolor="black",
                linewidth=_TRIANGLE_STROKE,
            )
        )

    if len(scaled) > 1:
        segments = np.stack([scaled, np.roll(scaled, -1, axis=0)], axis=1)
        ax.add_collection(
            LineCollection(segments, colors="black", linewidths=_BOUNDARY_STROKE)
        )

    return fig


def _unitless_size(svg: str) -> str:
    """Strip the "pt" unit from the root element's width and height.

    matplotlib sizes SVG output in points; with the figure laid out at 72
    units per inch the bare numbers equal the requested pixel size.
    """
    root = _SVG_ROOT.search(svg)
    if root is None:
        return svg
    tag = _PT_LENGTH.sub(r'\1="\2"', root.group(0))
    return svg[: root.start()] + tag + svg[root.end() :]


def render_triangulation(
    points: np.ndarray,
    triangles: np.ndarray,
    output_path: str | Path,
    *,
    width: int = 1600,
    seed: int = 0,
) -> Path:
    """Render a triangulation to an SVG file.

    Args:
        points: Vertex array of shape (N, 2).
        triangles: Vertex index triples of shape (M, 3).
        output_path: Destination ``.svg`` path. Parent directories are created.
        width: Output width in pixels.
        seed: Seed for the triangle fill color sequence.

    Returns:
        The path written.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = build_figure(points, triangles, width=width, seed=seed)
    buf = io.StringIO()
    fig.savefig(buf, format="svg")
    output_path.write_text(_unitless_size(buf.getvalue()), encoding="utf-8")
    logger.info("Wrote triangulation image to %s", output_path)
    return output_path


__all__ = ["TRIANGLE_COLORS", "build_figure", "render_triangulation"]
