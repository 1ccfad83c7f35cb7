"""Triangulation pipeline engine.

Config hierarchy, event system, observers, and the pipeline orchestrator.

Import boundary: engine/ may import from core/ and the computation modules,
but those must never import from engine/.
"""

from convextri.core.context import PipelineContext, Stage
from convextri.engine.config import (
    PipelineConfig,
    RenderConfig,
    SolverConfig,
    load_config,
    serialize_config,
)
from convextri.engine.console_observer import ConsoleObserver
from convextri.engine.events import (
    ImageRendered,
    ProblemLoaded,
    ResultWritten,
    RunEvent,
    RunFailed,
    RunFinished,
    RunStarted,
    StageFinished,
    TriangulationSolved,
)
from convextri.engine.observers import EventBus, Observer
from convextri.engine.pipeline import TriangulationPipeline, build_stages
from convextri.engine.timing import TimingObserver

__all__ = [
    "ConsoleObserver",
    "EventBus",
    "ImageRendered",
    "Observer",
    "PipelineConfig",
    "PipelineContext",
    "ProblemLoaded",
    "RenderConfig",
    "ResultWritten",
    "RunEvent",
    "RunFailed",
    "RunFinished",
    "RunStarted",
    "SolverConfig",
    "Stage",
    "StageFinished",
    "TimingObserver",
    "TriangulationPipeline",
    "TriangulationSolved",
    "build_stages",
    "load_config",
    "serialize_config",
]
