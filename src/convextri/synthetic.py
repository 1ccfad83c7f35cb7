"""Synthetic convex polygon generation.

Produces counter-clockwise vertex arrays with known convexity for tests,
benchmarks, and the ``convextri generate`` command.
"""

from __future__ import annotations

import numpy as np


def regular_polygon(
    n: int,
    radius: float = 1.0,
    center: tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Return the vertices of a regular n-gon in counter-clockwise order.

    The first vertex lies on the positive x axis relative to *center*.

    Args:
        n: Number of vertices.
        radius: Circumradius.
        center: Polygon centre (x, y).

    Returns:
        Vertex array of shape (n, 2), float32.

    Raises:
        ValueError: If *n* is negative.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    angles = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
    return _on_circle(angles, radius, center)


def random_convex_polygon(
    n: int,
    rng: np.random.Generator | None = None,
    radius: float = 1.0,
    center: tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """Return a random convex polygon inscribed in a circle.

    Vertices are placed at *n* distinct random angles, sorted ascending, so
    the polygon is strictly convex and counter-clockwise.

    Args:
        n: Number of vertices.
        rng: Random generator. A fresh unseeded generator is used if None.
        radius: Circle radius.
        center: Circle centre (x, y).

    Returns:
        Vertex array of shape (n, 2), float32.

    Raises:
        ValueError: If *n* is negative.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if rng is None:
        rng = np.random.default_rng()

    angles = np.sort(rng.uniform(0.0, 2.0 * np.pi, size=n))
    # float32 output can merge near-identical angles; resample until distinct
    while n > 1 and len(np.unique(_on_circle(angles, radius, center), axis=0)) < n:
        angles = np.sort(rng.uniform(0.0, 2.0 * np.pi, size=n))
    return _on_circle(angles, radius, center)


def _on_circle(
    angles: np.ndarray, radius: float, center: tuple[float, float]
) -> np.ndarray:
    """Map angles to float32 points on a circle."""
    cx, cy = center
    pts = np.stack(
        [cx + radius * np.cos(angles), cy + radius * np.sin(angles)], axis=1
    )
    return pts.astype(np.float32).reshape(len(angles), 2)


__all__ = ["random_convex_polygon", "regular_polygon"]
