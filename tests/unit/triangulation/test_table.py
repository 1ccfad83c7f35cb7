"""Unit tests for CostTable storage, distance phase and lifecycle."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from convextri.errors import InvalidInputError, TriangulationInvariantError
from convextri.geometry import as_point_array
from convextri.synthetic import regular_polygon
from convextri.triangulation.table import NO_APEX, CostTable, cell_index


def test_cell_index_row_major() -> None:
    assert cell_index(0, 0, 5) == 0
    assert cell_index(0, 4, 5) == 4
    assert cell_index(2, 3, 5) == 13
    assert cell_index(4, 4, 5) == 24


class TestAllocation:
    """Fresh tables are sized and initialised so unfilled cells are visible."""

    def test_buffers_are_flat_and_contiguous(self, unit_square: np.ndarray) -> None:
        table = CostTable.allocate(as_point_array(unit_square))
        for buf in (table.cost, table.dist, table.apex):
            assert buf.shape == (16,)
            assert buf.flags.c_contiguous

    def test_initial_state(self, unit_square: np.ndarray) -> None:
        table = CostTable.allocate(as_point_array(unit_square))
        assert np.all(np.isnan(table.cost))
        assert np.all(table.apex == NO_APEX)
        assert table.apex.dtype == np.int32
        assert not table.complete

    def test_dtype_follows_argument(self, unit_square: np.ndarray) -> None:
        table = CostTable.allocate(as_point_array(unit_square), dtype="float64")
        assert table.cost.dtype == np.float64
        assert table.dist.dtype == np.float64

    def test_rejects_unknown_dtype(self, unit_square: np.ndarray) -> None:
        with pytest.raises(InvalidInputError, match="dtype"):
            CostTable.allocate(as_point_array(unit_square), dtype="float16")

    def test_grid_is_view_over_flat_buffer(self, unit_square: np.ndarray) -> None:
        table = CostTable.allocate(as_point_array(unit_square))
        grid = table.grid("dist")
        assert grid.shape == (4, 4)
        assert np.shares_memory(grid, table.dist)
        grid[1, 2] = 7.0
        assert table.dist[cell_index(1, 2, 4)] == 7.0

    def test_zero_vertices(self) -> None:
        table = CostTable.allocate(as_point_array([]))
        assert table.n == 0
        assert table.cost.shape == (0,)
        assert table.total_cost == 0.0


class TestDistancePhase:
    """compute_distances fills dist(i, j) for every i <= j."""

    def test_square_distances(self, unit_square: np.ndarray) -> None:
        points = as_point_array(unit_square, dtype="float64")
        table = CostTable.allocate(points, "float64")
        table.compute_distances()
        dist = table.grid("dist")
        assert dist[0, 1] == pytest.approx(1.0)
        assert dist[0, 2] == pytest.approx(np.sqrt(2.0))
        assert dist[1, 3] == pytest.approx(np.sqrt(2.0))
        assert dist[0, 3] == pytest.approx(1.0)
        np.testing.assert_array_equal(np.diag(dist), 0.0)

    def test_matches_brute_force(self) -> None:
        pts = as_point_array(regular_polygon(9), dtype="float64")
        table = CostTable.allocate(pts, "float64")
        table.compute_distances()
        dist = table.grid("dist")
        for i in range(9):
            for j in range(i, 9):
                assert dist[i, j] == pytest.approx(np.linalg.norm(pts[i] - pts[j]))

    def test_parallel_matches_serial(self) -> None:
        pts = as_point_array(regular_polygon(40))
        serial = CostTable.allocate(pts)
        serial.compute_distances()
        parallel = CostTable.allocate(pts)
        with ThreadPoolExecutor(max_workers=4) as pool:
            parallel.compute_distances(pool)
        np.testing.assert_array_equal(
            np.triu(serial.grid("dist")), np.triu(parallel.grid("dist"))
        )

    def test_lower_triangle_untouched(self) -> None:
        table = CostTable.allocate(as_point_array(regular_polygon(6)))
        table.compute_distances()
        assert np.all(np.tril(table.grid("dist"), k=-1) == 0.0)

    def test_single_vertex_is_noop(self) -> None:
        table = CostTable.allocate(as_point_array([(3.0, 4.0)]))
        table.compute_distances()
        assert table.dist[0] == 0.0


class TestLifecycle:
    """Tables release their buffers deterministically."""

    def test_context_manager_releases(self, unit_square: np.ndarray) -> None:
        with CostTable.allocate(as_point_array(unit_square)) as table:
            assert not table.released
        assert table.released

    def test_release_on_exception(self, unit_square: np.ndarray) -> None:
        with pytest.raises(RuntimeError, match="boom"):
            with CostTable.allocate(as_point_array(unit_square)) as table:
                raise RuntimeError("boom")
        assert table.released

    def test_release_is_idempotent(self, unit_square: np.ndarray) -> None:
        table = CostTable.allocate(as_point_array(unit_square))
        table.release()
        table.release()
        assert table.released

    def test_access_after_release_raises(self, unit_square: np.ndarray) -> None:
        table = CostTable.allocate(as_point_array(unit_square))
        table.release()
        with pytest.raises(TriangulationInvariantError, match="release"):
            _ = table.cost

    def test_total_cost_requires_complete(self, unit_square: np.ndarray) -> None:
        table = CostTable.allocate(as_point_array(unit_square))
        with pytest.raises(TriangulationInvariantError):
            _ = table.total_cost


def test_cell_snapshot(unit_square: np.ndarray) -> None:
    table = CostTable.allocate(as_point_array(unit_square))
    table.compute_distances()
    cell = table.cell(0, 2)
    assert cell.i == 0 and cell.j == 2
    assert cell.dist == pytest.approx(np.sqrt(2.0), rel=1e-6)
    assert cell.apex == NO_APEX
    with pytest.raises(IndexError):
        table.cell(2, 1)
    with pytest.raises(IndexError):
        table.cell(0, 4)
