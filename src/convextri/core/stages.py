"""Concrete pipeline stages: load, triangulate, write, render.

Each stage satisfies the :class:`~convextri.core.context.Stage` protocol via
structural typing and records its output on the :class:`PipelineContext`.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from convextri.core.context import PipelineContext
from convextri.io import read_problem, write_result
from convextri.triangulation import triangulate
from convextri.triangulation.solver import DEFAULT_CHUNK_SIZE
from convextri.visualization import render_triangulation

__all__ = [
    "LoadProblemStage",
    "RenderStage",
    "TriangulationStage",
    "WriteResultStage",
]

logger = logging.getLogger(__name__)


class LoadProblemStage:
    """Stage 1: reads the polygon from a binary problem file.

    Args:
        input_path: Path to the problem file.

    """

    def __init__(self, input_path: str | Path) -> None:
        self._input_path = Path(input_path)

    def run(self, context: PipelineContext) -> PipelineContext:
        """Populate ``context.points``."""
        context.points = read_problem(self._input_path)
        logger.debug("Read %d vertices from %s", len(context.points), self._input_path)
        return context


class TriangulationStage:
    """Stage 2: computes the minimum-weight triangulation of ``context.points``.

    Args:
        workers: Worker threads for the table fill (None = CPU count).
        dtype: Table arithmetic, ``"float32"`` or ``"float64"``.
        chunk_size: Cells per pool task within one width level.

    """

    def __init__(
        self,
        workers: int | None = None,
        dtype: str = "float32",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._workers = workers
        self._dtype = dtype
        self._chunk_size = chunk_size

    def run(self, context: PipelineContext) -> PipelineContext:
        """Populate ``context.cost``, ``context.triangles`` and ``context.workers``.

        Raises:
            ValueError: If ``context.points`` has not been populated.
        """
        points = context.get("points")
        result = triangulate(
            points,  # type: ignore[arg-type]
            workers=self._workers,
            dtype=self._dtype,
            chunk_size=self._chunk_size,
        )
        context.cost = result.cost
        context.triangles = result.triangles
        context.workers = result.workers
        return context


class WriteResultStage:
    """Stage 3: writes cost and triangles to a binary result file.

    Args:
        result_path: Destination path.

    """

    def __init__(self, result_path: str | Path) -> None:
        self._result_path = Path(result_path)

    def run(self, context: PipelineContext) -> PipelineContext:
        """Write the result and record ``context.result_path``."""
        cost = context.get("cost")
        triangles = context.get("triangles")
        write_result(self._result_path, cost, triangles)  # type: ignore[arg-type]
        context.result_path = str(self._result_path)
        return context


class RenderStage:
    """Stage 4 (optional): renders the triangulation to SVG.

    Args:
        image_path: Destination ``.svg`` path.
        width: Image width in pixels.
        seed: Seed for the triangle fill colors.

    """

    def __init__(
        self, image_path: str | Path, width: int = 1600, seed: int = 0
    ) -> None:
        self._image_path = Path(image_path)
        self._width = width
        self._seed = seed

    def run(self, context: PipelineContext) -> PipelineContext:
        """Render and record ``context.image_path``."""
        points = context.get("points")
        triangles = context.get("triangles")
        render_triangulation(
            np.asarray(points),
            np.asarray(triangles),
            self._image_path,
            width=self._width,
            seed=self._seed,
        )
        context.image_path = str(self._image_path)
        return context
