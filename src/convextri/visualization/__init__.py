"""Visualization utilities for triangulation results."""

from .svg import TRIANGLE_COLORS, build_figure, render_triangulation

__all__ = ["TRIANGLE_COLORS", "build_figure", "render_triangulation"]
