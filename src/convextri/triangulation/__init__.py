"""Minimum-weight triangulation of convex polygons.

The cost of a triangulation is the sum of its triangle perimeters. The
optimum is found with an O(N^3) dynamic programme over vertex spans, filled
level by level in parallel (:mod:`~convextri.triangulation.solver`) and
read back through apex back-pointers (:mod:`~convextri.triangulation.extract`).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from convextri.errors import InvalidInputError, TriangulationInvariantError
from convextri.geometry import Point, as_point_array
from convextri.triangulation.extract import extract_triangles
from convextri.triangulation.solver import DEFAULT_CHUNK_SIZE, WavefrontSolver
from convextri.triangulation.table import (
    NO_APEX,
    SUPPORTED_DTYPES,
    Cell,
    CostTable,
    cell_index,
)


@dataclass(frozen=True)
class TriangulationResult:
    """Optimal triangulation of one polygon.

    Attributes:
        cost: Sum of the perimeters of all triangles; 0 for fewer than 3
            vertices.
        triangles: Shape (max(N - 2, 0), 3), int32. Rows are ``(i, apex, j)``
            vertex indices with ``i < apex < j``, in pre-order of the split
            tree rooted at ``(0, N - 1)``.
        workers: Threads the table fill ran on.
    """

    cost: float
    triangles: np.ndarray
    workers: int = 1

    def __len__(self) -> int:
        return int(self.triangles.shape[0])


def triangulate(
    points: Iterable[Point] | Iterable[tuple[float, float]] | np.ndarray,
    *,
    workers: int | None = None,
    dtype: str = "float32",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> TriangulationResult:
    """Compute the minimum-weight triangulation of a convex polygon.

    Convexity and counter-clockwise ordering are assumed, not checked.

    Args:
        points: Polygon vertices in counter-clockwise order.
        workers: Worker threads for the table fill (``None`` = CPU count).
        dtype: ``"float32"`` or ``"float64"`` arithmetic for the table.
        chunk_size: Cells per pool task within one width level.

    Returns:
        The optimal cost and triangle list.

    Raises:
        InvalidInputError: If *points*, *dtype*, *workers* or *chunk_size*
            is invalid. Raised before any table is allocated.
        TriangulationInvariantError: If the filled table is inconsistent.
    """
    if dtype not in SUPPORTED_DTYPES:
        raise InvalidInputError(
            f"Unsupported dtype {dtype!r}. Valid values: {list(SUPPORTED_DTYPES)}"
        )
    coords = as_point_array(points, dtype=dtype)
    solver = WavefrontSolver(workers=workers, chunk_size=chunk_size)

    with CostTable.allocate(coords, dtype=dtype) as table:
        solver.fill(table)
        triangles = extract_triangles(table)
        cost = table.total_cost

    return TriangulationResult(
        cost=cost, triangles=triangles, workers=solver.workers
    )


__all__ = [
    "NO_APEX",
    "SUPPORTED_DTYPES",
    "Cell",
    "CostTable",
    "InvalidInputError",
    "TriangulationInvariantError",
    "TriangulationResult",
    "WavefrontSolver",
    "cell_index",
    "extract_triangles",
    "triangulate",
]
