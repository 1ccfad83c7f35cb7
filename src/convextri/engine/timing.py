"""TimingObserver: where the time of one run went, and how fast the solver ran.

The fill phase evaluates one candidate apex per vertex triple, C(N, 3) in
total, so dividing that count by the triangulation stage's wall-clock time
gives a throughput that is comparable across polygon sizes and worker counts.
"""

from __future__ import annotations

import logging
from math import comb
from pathlib import Path

from convextri.engine.events import (
    RunEvent,
    RunFailed,
    RunFinished,
    RunStarted,
    StageFinished,
    TriangulationSolved,
)

logger = logging.getLogger(__name__)

_SOLVER_STAGE = "TriangulationStage"
_RULE_WIDTH = 52


def candidate_evaluations(n_points: int) -> int:
    """Number of ``(i, k, j)`` apex candidates the fill phase evaluates."""
    return comb(n_points, 3) if n_points >= 3 else 0


class TimingObserver:
    """Builds a timing report and emits it when the run ends.

    The report is logged at INFO on :class:`RunFinished` or
    :class:`RunFailed` and, when *output_path* is set, written there too.

    Args:
        output_path: Optional file for the report.
    """

    def __init__(self, output_path: str | Path | None = None) -> None:
        self._output_path = Path(output_path) if output_path is not None else None
        self.run_id = ""
        self.stage_times: dict[str, float] = {}
        self.total_time: float | None = None
        self.n_points: int | None = None
        self.workers: int | None = None
        self.failed_stage: str | None = None

    def on_event(self, event: RunEvent) -> None:
        if isinstance(event, RunStarted):
            self.run_id = event.run_id
        elif isinstance(event, StageFinished):
            self.stage_times[event.stage_name] = event.elapsed_seconds
        elif isinstance(event, TriangulationSolved):
            self.n_points = event.n_points
            self.workers = event.workers
        elif isinstance(event, RunFailed):
            self.failed_stage = event.stage_name
            self.total_time = event.elapsed_seconds
            self._finalize()
        elif isinstance(event, RunFinished):
            self.total_time = event.elapsed_seconds
            self._finalize()

    @property
    def throughput(self) -> float | None:
        """Candidate evaluations per second in the triangulation stage.

        ``None`` until a triangulation has been timed, or when it took no
        measurable time or had nothing to evaluate.
        """
        seconds = self.stage_times.get(_SOLVER_STAGE)
        if self.n_points is None or not seconds:
            return None
        evaluations = candidate_evaluations(self.n_points)
        return evaluations / seconds if evaluations else None

    def report(self) -> str:
        total = self.total_time or None
        lines = [f"Timing report for {self.run_id}", "=" * _RULE_WIDTH]
        for name, seconds in self.stage_times.items():
            share = f"  {seconds / total:6.1%}" if total else ""
            lines.append(f"  {name:<28s}{seconds:10.3f}s{share}")
        lines.append("-" * _RULE_WIDTH)
        total_text = f"{total:10.3f}s" if total is not None else f"{'n/a':>11s}"
        lines.append(f"  {'total':<28s}{total_text}")

        rate = self.throughput
        if rate is not None:
            lines.append(
                f"  {self.n_points} vertices on {self.workers} worker(s): "
                f"{rate:.3e} candidates/s"
            )
        if self.failed_stage is not None:
            lines.append(f"  run failed in {self.failed_stage}; timings are partial")
        return "\n".join(lines)

    def _finalize(self) -> None:
        text = self.report()
        logger.info("\n%s", text)
        if self._output_path is not None:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            self._output_path.write_text(text, encoding="utf-8")


__all__ = ["TimingObserver", "candidate_evaluations"]
