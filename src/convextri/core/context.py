"""The stage contract and the state object passed from stage to stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Stage(Protocol):
    """A pipeline step: reads what earlier stages left on the context, adds
    its own output, and hands the context on.

    Stages are matched structurally; they do not subclass anything.
    """

    def run(self, context: PipelineContext) -> PipelineContext: ...


@dataclass
class PipelineContext:
    """Mutable record of everything a run has produced so far.

    Fields stay ``None`` until their stage has run:

    ======================  =======================================
    ``LoadProblemStage``    ``points``
    ``TriangulationStage``  ``cost``, ``triangles``, ``workers``
    ``WriteResultStage``    ``result_path``
    ``RenderStage``         ``image_path``
    ======================  =======================================

    Attributes:
        points: ``(N, 2)`` float32 vertices.
        cost: Total perimeter of the optimal triangulation.
        triangles: ``(N - 2, 3)`` int32 vertex triples.
        workers: Threads the table fill ran on.
        result_path: Where the result file was written.
        image_path: Where the SVG was written.
        stage_timing: Seconds spent in each stage, keyed by class name.
    """

    points: np.ndarray | None = None
    cost: float | None = None
    triangles: np.ndarray | None = None
    workers: int | None = None
    result_path: str | None = None
    image_path: str | None = None
    stage_timing: dict[str, float] = field(default_factory=dict)

    def get(self, field_name: str) -> object:
        """Return *field_name*, which a previous stage must have set.

        Raises:
            ValueError: If the field is still ``None``.
            AttributeError: If there is no such field.
        """
        value = getattr(self, field_name)
        if value is None:
            raise ValueError(
                f"PipelineContext.{field_name} has not been set; "
                f"the stage producing it must run first",
            )
        return value
