"""Reconstruction of the chosen triangles from a filled cost table."""

from __future__ import annotations

import numpy as np

from convextri.errors import TriangulationInvariantError
from convextri.triangulation.table import NO_APEX, CostTable, cell_index


def extract_triangles(table: CostTable) -> np.ndarray:
    """Walk the apex back-pointers from the root span ``(0, N - 1)``.

    Triangles are emitted in pre-order: the triangle of a span, then every
    triangle of its left sub-span ``(i, apex)``, then every triangle of its
    right sub-span ``(apex, j)``. An explicit stack replaces recursion so
    fan-shaped triangulations of large polygons cannot exhaust the call
    stack.

    Args:
        table: Table filled by
            :class:`~convextri.triangulation.solver.WavefrontSolver`.

    Returns:
        Array of shape (max(N - 2, 0), 3), int32, one ``(i, apex, j)`` row per
        triangle with ``i < apex < j``.

    Raises:
        TriangulationInvariantError: If the table is incomplete, or a span
            carries an apex inconsistent with its width.
    """
    n = table.n
    if n < 3:
        return np.empty((0, 3), dtype=np.int32)
    if not table.complete:
        raise TriangulationInvariantError(
            "triangle extraction started before the fill phase completed"
        )

    apex = table.apex
    triangles = np.empty((n - 2, 3), dtype=np.int32)
    emitted = 0
    stack: list[tuple[int, int]] = [(0, n - 1)]

    while stack:
        i, j = stack.pop()
        k = int(apex[cell_index(i, j, n)])

        if j - i < 2:
            if k != NO_APEX:
                raise TriangulationInvariantError(
                    f"span ({i}, {j}) has fewer than 3 vertices but apex {k}"
                )
            continue
        if not i < k < j:
            raise TriangulationInvariantError(
                f"span ({i}, {j}) has apex {k} outside the open interval"
            )
        if emitted == n - 2:
            raise TriangulationInvariantError(
                f"back-pointers describe more than {n - 2} triangles"
            )

        triangles[emitted] = (i, k, j)
        emitted += 1
        # Right pushed first so the left sub-span is expanded first.
        stack.append((k, j))
        stack.append((i, k))

    if emitted != n - 2:
        raise TriangulationInvariantError(
            f"expected {n - 2} triangles, back-pointers yielded {emitted}"
        )
    return triangles


__all__ = ["extract_triangles"]
