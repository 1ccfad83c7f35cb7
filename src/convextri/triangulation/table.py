"""Cost table for the convex polygon triangulation recurrence.

The table holds one cell per vertex span ``(i, j)`` with ``0 <= i <= j < N``.
Each field lives in its own flat, contiguous buffer of length ``N * N``
addressed by :func:`cell_index`; row and column views over those buffers give
the solver vectorized access without copying.

Only the upper triangle (``i <= j``) is meaningful. Lower-triangle slots are
allocated but never read or written.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import NamedTuple

import numpy as np

from convextri.errors import InvalidInputError, TriangulationInvariantError
from convextri.geometry import row_distances

logger = logging.getLogger(__name__)

# Apex value of a span with fewer than three vertices
NO_APEX: int = -1

SUPPORTED_DTYPES: tuple[str, ...] = ("float32", "float64")


def cell_index(i: int, j: int, n: int) -> int:
    """Return the flat buffer offset of cell ``(i, j)`` in an ``n``-vertex table."""
    return i * n + j


class Cell(NamedTuple):
    """Snapshot of a single table cell.

    Attributes:
        i: First vertex of the span.
        j: Last vertex of the span.
        cost: Minimum triangulation cost of vertices ``i..j``.
        dist: Euclidean distance between vertex ``i`` and vertex ``j``.
        apex: Splitting vertex, or :data:`NO_APEX` for trivial spans.
    """

    i: int
    j: int
    cost: float
    dist: float
    apex: int


class CostTable:
    """Owned storage for one triangulation run.

    Created by :meth:`allocate`, filled by
    :class:`~convextri.triangulation.solver.WavefrontSolver`, read by
    :func:`~convextri.triangulation.extract.extract_triangles`, then released.
    Use it as a context manager so the buffers are dropped on every exit
    path::

        with CostTable.allocate(points) as table:
            WavefrontSolver().fill(table)
            triangles = extract_triangles(table)

    ``cost`` starts as NaN and ``apex`` as :data:`NO_APEX` so a cell the solver
    never reached can be told apart from a filled one. :attr:`complete` is set
    only once the whole cost phase has finished.

    Args:
        points: Read-only vertex array of shape (N, 2).
        dtype: Float dtype for ``cost`` and ``dist``.
    """

    def __init__(self, points: np.ndarray, dtype: str = "float32") -> None:
        if dtype not in SUPPORTED_DTYPES:
            raise InvalidInputError(
                f"Unsupported table dtype {dtype!r}. "
                f"Valid values: {list(SUPPORTED_DTYPES)}"
            )
        n = int(points.shape[0])
        self.n: int = n
        self.dtype = np.dtype(dtype)
        self.points: np.ndarray = points
        self.complete: bool = False
        self._cost: np.ndarray | None = np.full(n * n, np.nan, dtype=self.dtype)
        self._dist: np.ndarray | None = np.zeros(n * n, dtype=self.dtype)
        self._apex: np.ndarray | None = np.full(n * n, NO_APEX, dtype=np.int32)
        logger.debug("Allocated cost table for %d vertices (%s)", n, dtype)

    @classmethod
    def allocate(cls, points: np.ndarray, dtype: str = "float32") -> CostTable:
        """Allocate a table sized for *points*."""
        return cls(points, dtype=dtype)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> CostTable:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def release(self) -> None:
        """Drop the table buffers. Safe to call more than once."""
        self._cost = None
        self._dist = None
        self._apex = None
        self.complete = False

    @property
    def released(self) -> bool:
        """True once :meth:`release` has run."""
        return self._cost is None

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def _buffer(self, buf: np.ndarray | None) -> np.ndarray:
        if buf is None:
            raise TriangulationInvariantError("cost table accessed after release")
        return buf

    @property
    def cost(self) -> np.ndarray:
        """Flat cost buffer, length ``n * n``."""
        return self._buffer(self._cost)

    @property
    def dist(self) -> np.ndarray:
        """Flat distance buffer, length ``n * n``."""
        return self._buffer(self._dist)

    @property
    def apex(self) -> np.ndarray:
        """Flat apex buffer, length ``n * n``, int32."""
        return self._buffer(self._apex)

    def grid(self, field: str) -> np.ndarray:
        """Return a zero-copy ``(n, n)`` view over one of the flat buffers.

        Args:
            field: One of ``"cost"``, ``"dist"`` or ``"apex"``.
        """
        return getattr(self, field).reshape(self.n, self.n)

    def cell(self, i: int, j: int) -> Cell:
        """Return a snapshot of cell ``(i, j)``.

        Raises:
            IndexError: If ``(i, j)`` is not a valid span.
        """
        if not 0 <= i <= j < self.n:
            raise IndexError(f"invalid span ({i}, {j}) for {self.n} vertices")
        idx = cell_index(i, j, self.n)
        return Cell(
            i=i,
            j=j,
            cost=float(self.cost[idx]),
            dist=float(self.dist[idx]),
            apex=int(self.apex[idx]),
        )

    @property
    def total_cost(self) -> float:
        """Cost of the whole polygon, ``cost(0, n - 1)``; 0 below 3 vertices."""
        if self.n < 3:
            return 0.0
        if not self.complete:
            raise TriangulationInvariantError(
                "total cost requested before the fill phase completed"
            )
        return float(self.cost[cell_index(0, self.n - 1, self.n)])

    # ------------------------------------------------------------------
    # Distance phase
    # ------------------------------------------------------------------

    def _fill_distance_row(self, i: int) -> None:
        """Write ``dist(i, j)`` for every ``j >= i``. Touches row *i* only."""
        start = cell_index(i, i, self.n)
        self.dist[start : start + self.n - i] = row_distances(self.points, i)

    def compute_distances(self, executor: Executor | None = None) -> None:
        """Fill the ``dist`` field of every valid cell.

        Rows are independent; with an *executor* they are fanned out and this
        method returns only once every row has been written.

        Args:
            executor: Optional pool to spread the rows over.
        """
        if self.n < 2:
            return
        if executor is None:
            for i in range(self.n):
                self._fill_distance_row(i)
            return
        futures = [executor.submit(self._fill_distance_row, i) for i in range(self.n)]
        for future in futures:
            future.result()


__all__ = ["NO_APEX", "SUPPORTED_DTYPES", "Cell", "CostTable", "cell_index"]
