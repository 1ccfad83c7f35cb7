"""TriangulationPipeline: runs the stages of one triangulation and reports.

Each stage's output is read off the :class:`PipelineContext` after it returns
and announced as a typed event (vertex count, triangle count and cost,
written paths), so observers never inspect the context themselves.

:func:`build_stages` turns a :class:`~convextri.engine.config.PipelineConfig`
into the stage list.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from convextri.core.context import PipelineContext, Stage
from convextri.engine.config import PipelineConfig, serialize_config
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

logger = logging.getLogger(__name__)


class TriangulationPipeline:
    """Runs the triangulation stages in order and reports through events.

    ``run()`` writes ``config.yaml`` into ``config.output_dir`` when one is
    set, emits :class:`RunStarted`, then for every stage a
    :class:`StageFinished` followed by the domain events for the context
    fields that stage filled in, and finally :class:`RunFinished`. If a stage
    raises, :class:`RunFailed` is emitted and the exception re-raised.

    Example::

        config = load_config(cli_overrides={"input_path": "poly.bin"})
        pipeline = TriangulationPipeline(
            stages=build_stages(config),
            config=config,
            observers=[TimingObserver()],
        )
        context = pipeline.run()

    Args:
        stages: Ordered list of Stage instances to execute.
        config: Frozen PipelineConfig for this run.
        observers: Observers receiving every event, in list order.
    """

    def __init__(
        self,
        stages: list[Stage],
        config: PipelineConfig,
        observers: list[Observer] | None = None,
    ) -> None:
        self._stages = list(stages)
        self._config = config
        self._bus = EventBus(observers)

    def run(self) -> PipelineContext:
        """Execute all stages in order and return the accumulated context.

        Raises:
            Exception: Whatever a stage raised, after ``RunFailed`` is emitted.
        """
        run_id = self._config.run_id
        pipeline_start = time.monotonic()

        if self._config.output_dir:
            output_dir = Path(self._config.output_dir).expanduser()
            output_dir.mkdir(parents=True, exist_ok=True)
            (output_dir / "config.yaml").write_text(
                serialize_config(self._config), encoding="utf-8"
            )

        self._bus.emit(
            RunStarted(
                run_id=run_id, n_stages=len(self._stages), config=self._config
            )
        )

        context = PipelineContext()
        for i, stage in enumerate(self._stages):
            stage_name = type(stage).__name__
            before = _produced(context)
            stage_start = time.monotonic()
            try:
                context = stage.run(context)
            except Exception as exc:
                logger.debug("%s raised %s", stage_name, type(exc).__name__)
                self._bus.emit(
                    RunFailed(
                        run_id=run_id,
                        error=str(exc),
                        stage_name=stage_name,
                        elapsed_seconds=time.monotonic() - pipeline_start,
                    )
                )
                raise
            elapsed = time.monotonic() - stage_start
            context.stage_timing[stage_name] = elapsed
            logger.debug("%s finished in %.3fs", stage_name, elapsed)

            self._bus.emit(
                StageFinished(
                    run_id=run_id,
                    stage_name=stage_name,
                    stage_index=i,
                    elapsed_seconds=elapsed,
                )
            )
            for event in self._domain_events(context, _produced(context) - before):
                self._bus.emit(event)

        self._bus.emit(
            RunFinished(
                run_id=run_id,
                elapsed_seconds=time.monotonic() - pipeline_start,
                context=context,
            )
        )
        return context

    def _domain_events(
        self, context: PipelineContext, produced: set[str]
    ) -> list[RunEvent]:
        """Events announcing the context fields in *produced*."""
        run_id = self._config.run_id
        events: list[RunEvent] = []
        if "points" in produced:
            events.append(
                ProblemLoaded(
                    run_id=run_id,
                    source=self._config.input_path,
                    n_points=len(context.points),  # type: ignore[arg-type]
                )
            )
        if "triangles" in produced:
            events.append(
                TriangulationSolved(
                    run_id=run_id,
                    n_points=0 if context.points is None else len(context.points),
                    n_triangles=len(context.triangles),  # type: ignore[arg-type]
                    cost=float(context.cost or 0.0),
                    workers=context.workers or 1,
                    dtype=self._config.solver.dtype,
                )
            )
        if "result_path" in produced:
            events.append(
                ResultWritten(run_id=run_id, path=context.result_path or "")
            )
        if "image_path" in produced:
            events.append(ImageRendered(run_id=run_id, path=context.image_path or ""))
        return events


def _produced(context: PipelineContext) -> set[str]:
    """Names of the output fields already set on *context*."""
    return {
        name
        for name in ("points", "triangles", "result_path", "image_path")
        if getattr(context, name) is not None
    }


# ---------------------------------------------------------------------------
# Stage factory
# ---------------------------------------------------------------------------


def build_stages(config: PipelineConfig) -> list[Stage]:
    """Construct pipeline stages from a :class:`PipelineConfig`.

    Always LoadProblemStage → TriangulationStage, followed by
    WriteResultStage when ``config.result_path`` is set and RenderStage when
    ``config.image_path`` is set.

    Args:
        config: Frozen pipeline config.

    Returns:
        Ordered list of stage instances.

    Raises:
        ValueError: If ``config.input_path`` is empty.

    """
    from convextri.core import (
        LoadProblemStage,
        RenderStage,
        TriangulationStage,
        WriteResultStage,
    )

    if not config.input_path:
        raise ValueError("config.input_path is required to build the pipeline")

    stages: list[Stage] = [
        LoadProblemStage(config.input_path),
        TriangulationStage(
            workers=config.solver.workers,
            dtype=config.solver.dtype,
            chunk_size=config.solver.chunk_size,
        ),
    ]
    if config.result_path:
        stages.append(WriteResultStage(config.result_path))
    if config.image_path:
        stages.append(
            RenderStage(
                config.image_path,
                width=config.render.width,
                seed=config.render.seed,
            )
        )
    return stages
