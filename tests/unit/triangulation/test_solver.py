"""Unit tests for the wavefront solver."""

from __future__ import annotations

import threading

import numpy as np
import pytest

from convextri.errors import InvalidInputError
from convextri.geometry import as_point_array
from convextri.synthetic import random_convex_polygon, regular_polygon
from convextri.triangulation.solver import WavefrontSolver
from convextri.triangulation.table import NO_APEX, CostTable


def _filled(points: np.ndarray, dtype: str = "float64", **kwargs: object) -> CostTable:
    table = CostTable.allocate(as_point_array(points, dtype=dtype), dtype=dtype)
    WavefrontSolver(**kwargs).fill(table)  # type: ignore[arg-type]
    return table


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_default_workers_is_cpu_count() -> None:
    assert WavefrontSolver().workers >= 1


@pytest.mark.parametrize("workers", [0, -2])
def test_rejects_non_positive_workers(workers: int) -> None:
    with pytest.raises(InvalidInputError, match="workers"):
        WavefrontSolver(workers=workers)


def test_rejects_non_positive_chunk_size() -> None:
    with pytest.raises(InvalidInputError, match="chunk_size"):
        WavefrontSolver(chunk_size=0)


# ---------------------------------------------------------------------------
# Recurrence
# ---------------------------------------------------------------------------


class TestRecurrence:
    """Every filled cell satisfies the span recurrence."""

    @pytest.mark.parametrize("workers", [1, 3])
    def test_every_cell_matches_recurrence(
        self, rng: np.random.Generator, workers: int
    ) -> None:
        n = 11
        points = random_convex_polygon(n, rng=rng)
        table = _filled(points, workers=workers, chunk_size=2)
        cost = table.grid("cost")
        dist = table.grid("dist")
        apex = table.grid("apex")

        for i in range(n):
            for j in range(i, n):
                if j - i < 2:
                    assert cost[i, j] == 0.0
                    assert apex[i, j] == NO_APEX
                    continue
                candidates = [
                    (cost[i, k] + dist[i, k]) + (cost[k, j] + dist[k, j])
                    for k in range(i + 1, j)
                ]
                best = int(np.argmin(candidates))
                assert apex[i, j] == i + 1 + best
                assert cost[i, j] == dist[i, j] + candidates[best]

    def test_cost_never_below_children(self, rng: np.random.Generator) -> None:
        n = 14
        table = _filled(random_convex_polygon(n, rng=rng), workers=2, chunk_size=3)
        cost = table.grid("cost")
        apex = table.grid("apex")
        for i in range(n):
            for j in range(i + 2, n):
                k = apex[i, j]
                assert cost[i, j] >= 0.0
                assert cost[i, j] >= cost[i, k] + cost[k, j]

    def test_complete_flag_set(self, unit_square: np.ndarray) -> None:
        table = _filled(unit_square)
        assert table.complete
        assert not np.any(np.isnan(np.triu(table.grid("cost"))))

    def test_tie_breaks_to_smallest_apex(self, unit_square: np.ndarray) -> None:
        # Both diagonals of a square give the same cost.
        table = _filled(unit_square, dtype="float32")
        assert table.cell(0, 3).apex == 1

    def test_regular_polygon_ties_are_deterministic(self) -> None:
        pts = regular_polygon(10)
        first = _filled(pts, dtype="float32", workers=1)
        second = _filled(pts, dtype="float32", workers=4, chunk_size=1)
        np.testing.assert_array_equal(first.apex, second.apex)


# ---------------------------------------------------------------------------
# Parallel evaluation
# ---------------------------------------------------------------------------


class TestParallelFill:
    """The pool path produces the same table as the inline path."""

    @pytest.mark.parametrize("chunk_size", [1, 4, 64])
    def test_worker_count_does_not_change_table(
        self, rng: np.random.Generator, chunk_size: int
    ) -> None:
        pts = random_convex_polygon(30, rng=rng)
        serial = _filled(pts, dtype="float32", workers=1)
        parallel = _filled(pts, dtype="float32", workers=4, chunk_size=chunk_size)

        upper = np.triu(np.ones((30, 30), dtype=bool))
        np.testing.assert_array_equal(
            serial.grid("cost")[upper], parallel.grid("cost")[upper]
        )
        np.testing.assert_array_equal(serial.apex, parallel.apex)

    def test_failure_propagates_and_table_stays_incomplete(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _explode(*args: object) -> None:
            raise RuntimeError("cell failed")

        monkeypatch.setattr(WavefrontSolver, "_fill_block", staticmethod(_explode))
        table = CostTable.allocate(as_point_array(regular_polygon(12)))
        with pytest.raises(RuntimeError, match="cell failed"):
            WavefrontSolver(workers=3, chunk_size=2).fill(table)
        assert not table.complete

    def test_levels_run_in_width_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: list[tuple[int, int]] = []
        lock = threading.Lock()
        original = WavefrontSolver._fill_block

        def _record(table, diff, i_start, i_stop):  # type: ignore[no-untyped-def]
            with lock:
                seen.append((diff, i_stop - i_start))
            original(table, diff, i_start, i_stop)

        monkeypatch.setattr(WavefrontSolver, "_fill_block", staticmethod(_record))
        _filled(regular_polygon(16), workers=4, chunk_size=3)
        widths = [diff for diff, _ in seen]
        assert widths == sorted(widths)
        assert all(size <= 3 for _, size in seen)
        assert sum(size for _, size in seen) == sum(16 - d for d in range(2, 16))


class TestBlocks:
    """Splitting a level into blocks does not change what gets written."""

    def test_each_level_is_split_by_chunk_size(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        blocks: list[tuple[int, int, int]] = []
        original = WavefrontSolver._fill_block

        def _record(table, diff, i_start, i_stop):  # type: ignore[no-untyped-def]
            blocks.append((diff, i_start, i_stop))
            original(table, diff, i_start, i_stop)

        monkeypatch.setattr(WavefrontSolver, "_fill_block", staticmethod(_record))
        _filled(regular_polygon(10), workers=1, chunk_size=4)
        # Width 2 has 8 spans: two full blocks of four.
        assert [b for b in blocks if b[0] == 2] == [(2, 0, 4), (2, 4, 8)]
        # Width 5 has 5 spans: one full block and a remainder.
        assert [b for b in blocks if b[0] == 5] == [(5, 0, 4), (5, 4, 5)]
        assert [b for b in blocks if b[0] == 9] == [(9, 0, 1)]

    @pytest.mark.parametrize("workers", [1, 4])
    def test_single_cell_blocks_match_whole_levels(
        self, rng: np.random.Generator, workers: int
    ) -> None:
        pts = random_convex_polygon(25, rng=rng)
        whole = _filled(pts, workers=workers, chunk_size=64)
        split = _filled(pts, workers=workers, chunk_size=1)
        np.testing.assert_array_equal(whole.apex, split.apex)
        upper = np.triu(np.ones((25, 25), dtype=bool))
        np.testing.assert_array_equal(
            whole.grid("cost")[upper], split.grid("cost")[upper]
        )

    def test_block_leaves_other_cells_untouched(self) -> None:
        table = CostTable.allocate(as_point_array(regular_polygon(8)))
        solver = WavefrontSolver(workers=1)
        table.compute_distances()
        for diff in range(2):
            solver._fill_level(table, diff, None)
        WavefrontSolver._fill_block(table, 2, 1, 3)

        apex = table.grid("apex")
        assert apex[1, 3] == 2
        assert apex[2, 4] == 3
        assert apex[0, 2] == NO_APEX
        assert apex[3, 5] == NO_APEX
        assert np.isnan(table.grid("cost")[0, 2])


@pytest.mark.parametrize("n", [0, 1, 2])
def test_trivial_polygons(n: int) -> None:
    table = _filled(regular_polygon(n))
    assert table.complete
    assert table.total_cost == 0.0
    assert np.all(table.apex == NO_APEX)
