"""Core pipeline stages and data contracts.

Stage ordering:
1. LoadProblemStage: read the polygon from a binary problem file
2. TriangulationStage: minimum-weight triangulation via the wavefront solver
3. WriteResultStage: write cost and triangles to a binary result file
4. RenderStage: optional SVG rendering
"""

from convextri.core.context import PipelineContext, Stage
from convextri.core.stages import (
    LoadProblemStage,
    RenderStage,
    TriangulationStage,
    WriteResultStage,
)

__all__ = [
    "LoadProblemStage",
    "PipelineContext",
    "RenderStage",
    "Stage",
    "TriangulationStage",
    "WriteResultStage",
]
