"""Unit tests for synthetic convex polygon generation."""

from __future__ import annotations

import numpy as np
import pytest

from convextri.synthetic import random_convex_polygon, regular_polygon


def _cross_products(points: np.ndarray) -> np.ndarray:
    """z component of (b - a) x (c - b) for every consecutive vertex triple."""
    p = points.astype(np.float64)
    a, b, c = p, np.roll(p, -1, axis=0), np.roll(p, -2, axis=0)
    ab, bc = b - a, c - b
    return ab[:, 0] * bc[:, 1] - ab[:, 1] * bc[:, 0]


def test_regular_polygon_vertices_on_circle() -> None:
    pts = regular_polygon(8, radius=2.0, center=(1.0, -1.0))
    assert pts.shape == (8, 2)
    assert pts.dtype == np.float32
    radii = np.hypot(pts[:, 0] - 1.0, pts[:, 1] + 1.0)
    np.testing.assert_allclose(radii, 2.0, rtol=1e-6)
    np.testing.assert_allclose(pts[0], [3.0, -1.0], atol=1e-6)


def test_regular_polygon_is_counter_clockwise() -> None:
    assert np.all(_cross_products(regular_polygon(12)) > 0)


@pytest.mark.parametrize("n", [0, 1, 2])
def test_small_counts(n: int) -> None:
    assert regular_polygon(n).shape == (n, 2)
    assert random_convex_polygon(n).shape == (n, 2)


def test_random_polygon_is_strictly_convex(rng: np.random.Generator) -> None:
    pts = random_convex_polygon(200, rng=rng)
    assert pts.shape == (200, 2)
    assert np.all(_cross_products(pts) > 0)
    assert len(np.unique(pts, axis=0)) == 200


def test_random_polygon_reproducible_with_seed() -> None:
    first = random_convex_polygon(30, rng=np.random.default_rng(7))
    second = random_convex_polygon(30, rng=np.random.default_rng(7))
    np.testing.assert_array_equal(first, second)


def test_random_polygon_respects_radius(rng: np.random.Generator) -> None:
    pts = random_convex_polygon(50, rng=rng, radius=10.0)
    np.testing.assert_allclose(np.hypot(pts[:, 0], pts[:, 1]), 10.0, rtol=1e-5)


@pytest.mark.parametrize("factory", [regular_polygon, random_convex_polygon])
def test_negative_count_rejected(factory) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(ValueError, match="non-negative"):
        factory(-1)
