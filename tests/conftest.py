"""Shared fixtures for convextri tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from convextri.io import write_problem
from convextri.synthetic import random_convex_polygon


@pytest.fixture
def unit_triangle() -> np.ndarray:
    """Right triangle with unit legs, counter-clockwise."""
    return np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], dtype=np.float32)


@pytest.fixture
def unit_square() -> np.ndarray:
    """Unit square, counter-clockwise from the origin."""
    return np.array(
        [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]], dtype=np.float32
    )


@pytest.fixture
def rng() -> np.random.Generator:
    """Deterministically seeded random generator."""
    return np.random.default_rng(20240611)


@pytest.fixture
def problem_file(tmp_path: Path, rng: np.random.Generator) -> Path:
    """Binary problem file holding a random 12-vertex convex polygon."""
    path = tmp_path / "problem.bin"
    write_problem(path, random_convex_polygon(12, rng=rng))
    return path
