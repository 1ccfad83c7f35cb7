"""2D point type and Euclidean distance helpers."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from convextri.errors import InvalidInputError


@dataclass(frozen=True)
class Point:
    """Immutable polygon vertex.

    Attributes:
        x: Horizontal coordinate.
        y: Vertical coordinate.
    """

    x: float
    y: float


def distance(p: Point, q: Point) -> float:
    """Return the Euclidean distance between two points."""
    return math.hypot(p.x - q.x, p.y - q.y)


def as_point_array(
    points: Iterable[Point] | Iterable[tuple[float, float]] | np.ndarray,
    dtype: np.dtype | str = np.float32,
) -> np.ndarray:
    """Convert a vertex sequence to a read-only ``(N, 2)`` array.

    Accepts :class:`Point` instances, ``(x, y)`` pairs or an existing array.
    The returned array is a private copy with ``writeable`` cleared so every
    consumer shares the same immutable view of the input.

    Args:
        points: Polygon vertices in counter-clockwise order.
        dtype: Floating-point dtype of the returned array.

    Returns:
        Array of shape (N, 2).

    Raises:
        InvalidInputError: If the input is not a sequence of 2D coordinates
            or contains non-finite values.
    """
    if isinstance(points, np.ndarray):
        raw: object = points
    else:
        raw = [(p.x, p.y) if isinstance(p, Point) else p for p in points]

    try:
        arr = np.array(raw, dtype=dtype, copy=True)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"points must be numeric (x, y) pairs: {exc}") from exc

    if arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, 2)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidInputError(
            f"points must have shape (N, 2), got {tuple(arr.shape)}"
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError("points contain non-finite coordinates")

    arr.flags.writeable = False
    return arr


def row_distances(points: np.ndarray, i: int) -> np.ndarray:
    """Distances from vertex *i* to every vertex ``j >= i``.

    Args:
        points: Array of shape (N, 2).
        i: Row vertex index.

    Returns:
        Array of shape (N - i,) in the dtype of *points*; entry 0 is the
        zero self-distance.
    """
    delta = points[i:] - points[i]
    return np.sqrt(delta[:, 0] * delta[:, 0] + delta[:, 1] * delta[:, 1])
