"""Events emitted by :class:`~convextri.engine.pipeline.TriangulationPipeline`.

A run produces, in order:

- :class:`RunStarted`
- per stage, :class:`StageFinished` followed by the domain event for what the
  stage produced (:class:`ProblemLoaded`, :class:`TriangulationSolved`,
  :class:`ResultWritten` or :class:`ImageRendered`)
- :class:`RunFinished`, or :class:`RunFailed` if a stage raised.

Every event carries the ``run_id`` of the run that emitted it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class RunEvent:
    """Base class of every pipeline event.

    Attributes:
        run_id: Identifier of the emitting run.
        timestamp: Unix time at construction.
    """

    run_id: str
    timestamp: float = field(default_factory=time.time)


# ---------------------------------------------------------------------------
# Run lifecycle
# ---------------------------------------------------------------------------


@dataclass(frozen=True, kw_only=True)
class RunStarted(RunEvent):
    """The pipeline is about to run its first stage.

    Attributes:
        n_stages: Number of stages the run will execute.
        config: The frozen ``PipelineConfig`` of the run.
    """

    n_stages: int
    config: object = field(default=None, compare=False)


@dataclass(frozen=True, kw_only=True)
class StageFinished(RunEvent):
    """One stage returned normally."""

    stage_name: str
    stage_index: int
    elapsed_seconds: float


@dataclass(frozen=True, kw_only=True)
class RunFinished(RunEvent):
    """Every stage ran.

    Attributes:
        elapsed_seconds: Wall-clock time of the whole run.
        context: Final ``PipelineContext``.
    """

    elapsed_seconds: float
    context: object = field(default=None, compare=False)


@dataclass(frozen=True, kw_only=True)
class RunFailed(RunEvent):
    """A stage raised; the exception is re-raised after this event.

    Attributes:
        error: ``str()`` of the exception.
        stage_name: Class name of the stage that raised.
        elapsed_seconds: Wall-clock time up to the failure.
    """

    error: str
    stage_name: str
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# Domain events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, kw_only=True)
class ProblemLoaded(RunEvent):
    """The polygon was read from ``source``."""

    source: str
    n_points: int


@dataclass(frozen=True, kw_only=True)
class TriangulationSolved(RunEvent):
    """The optimal triangulation was computed.

    Attributes:
        n_points: Polygon vertex count.
        n_triangles: Rows of the triangle list, ``max(n_points - 2, 0)``.
        cost: Total perimeter of the triangulation.
        workers: Threads the table fill ran on.
        dtype: Table arithmetic, ``"float32"`` or ``"float64"``.
    """

    n_points: int
    n_triangles: int
    cost: float
    workers: int
    dtype: str


@dataclass(frozen=True, kw_only=True)
class ResultWritten(RunEvent):
    path: str


@dataclass(frozen=True, kw_only=True)
class ImageRendered(RunEvent):
    path: str


__all__ = [
    "ImageRendered",
    "ProblemLoaded",
    "ResultWritten",
    "RunEvent",
    "RunFailed",
    "RunFinished",
    "RunStarted",
    "StageFinished",
    "TriangulationSolved",
]
