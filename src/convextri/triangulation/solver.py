"""Wavefront evaluation of the minimum-weight triangulation recurrence.

The table is filled in order of increasing span width ``diff = j - i``.
Every cell of one width depends only on cells of strictly smaller width, so
the cells of a level are independent of each other: they are split into
chunks and evaluated on a thread pool, and the solver waits for every chunk
of a level before starting the next one.

A block of ``chunk_size`` consecutive cells is evaluated as one numpy
operation: the partial costs of every candidate apex are gathered into a
``(cells, diff - 1)`` matrix and reduced with ``argmin(axis=1)``. Work of
that size runs inside numpy with the GIL released, which is what lets the
pool threads overlap. Each cell is written by exactly one block and never
rewritten, so the shared table needs no locking.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, ThreadPoolExecutor

import numpy as np

from convextri.errors import InvalidInputError
from convextri.triangulation.table import NO_APEX, CostTable, cell_index

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE: int = 64


class WavefrontSolver:
    """Fills the ``cost`` and ``apex`` fields of a :class:`CostTable`.

    For a span ``(i, j)`` with at least three vertices the solver picks the
    apex ``k`` in ``(i, j)`` minimising::

        cost(i, k) + dist(i, k) + cost(k, j) + dist(k, j)

    and stores ``cost(i, j) = dist(i, j) + min``. Ties go to the smallest
    ``k``. Spans of one or two vertices cost 0 and keep :data:`NO_APEX`.

    The output does not depend on the worker count.

    Args:
        workers: Number of worker threads. ``None`` uses ``os.cpu_count()``;
            ``1`` evaluates everything on the calling thread.
        chunk_size: Cells per pool task within one width level. Levels with
            no more cells than this run on the calling thread.

    Raises:
        InvalidInputError: If *workers* or *chunk_size* is not positive.
    """

    def __init__(
        self,
        workers: int | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if workers is not None and workers < 1:
            raise InvalidInputError(f"workers must be positive, got {workers}")
        if chunk_size < 1:
            raise InvalidInputError(f"chunk_size must be positive, got {chunk_size}")
        self.workers: int = workers if workers is not None else (os.cpu_count() or 1)
        self.chunk_size = chunk_size

    def fill(self, table: CostTable) -> CostTable:
        """Run the distance phase and the cost phase on *table*.

        Sets ``table.complete`` only after the last level has been written.
        If any cell computation raises, the exception propagates and the
        table stays incomplete.

        Args:
            table: Freshly allocated table.

        Returns:
            The same table, filled.
        """
        n = table.n
        logger.debug(
            "Filling %d width levels for %d vertices on %d worker(s)",
            n,
            n,
            self.workers,
        )
        if self.workers == 1 or n < 3:
            table.compute_distances()
            for diff in range(n):
                self._fill_level(table, diff, None)
        else:
            with ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="wavefront"
            ) as pool:
                table.compute_distances(pool)
                for diff in range(n):
                    self._fill_level(table, diff, pool)

        table.complete = True
        return table

    # ------------------------------------------------------------------
    # Levels and chunks
    # ------------------------------------------------------------------

    def _fill_level(
        self, table: CostTable, diff: int, executor: Executor | None
    ) -> None:
        """Fill every cell of width *diff*; returns once all are written."""
        n = table.n
        if diff < 2:
            # Spans of one or two vertices: cells (j - diff, j) lie at a fixed
            # stride of n + 1 in the flat buffers.
            start = cell_index(0, diff, n)
            cells = slice(start, n * n, n + 1)
            table.cost[cells] = 0
            table.apex[cells] = NO_APEX
            return

        count = n - diff
        blocks = [
            (i_start, min(i_start + self.chunk_size, count))
            for i_start in range(0, count, self.chunk_size)
        ]
        if executor is None or len(blocks) == 1:
            for i_start, i_stop in blocks:
                self._fill_block(table, diff, i_start, i_stop)
            return

        futures = [
            executor.submit(self._fill_block, table, diff, i_start, i_stop)
            for i_start, i_stop in blocks
        ]
        for future in futures:
            future.result()

    @staticmethod
    def _fill_block(table: CostTable, diff: int, i_start: int, i_stop: int) -> None:
        """Fill cells ``(i, i + diff)`` for ``i`` in ``[i_start, i_stop)``."""
        n = table.n
        cost = table.cost
        dist = table.dist

        # rows: span starts i; columns: candidate apexes k = i+1 .. i+diff-1
        i = np.arange(i_start, i_stop)
        k = i[:, None] + np.arange(1, diff)[None, :]
        ik = i[:, None] * n + k
        kj = k * n + (i + diff)[:, None]

        candidates = cost[ik] + dist[ik]
        candidates += cost[kj] + dist[kj]

        # argmin returns the first minimum, i.e. the smallest k on ties.
        best = np.argmin(candidates, axis=1)
        cells = i * n + i + diff
        cost[cells] = dist[cells] + candidates[np.arange(i.size), best]
        table.apex[cells] = i + 1 + best


__all__ = ["DEFAULT_CHUNK_SIZE", "WavefrontSolver"]
