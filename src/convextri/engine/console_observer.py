"""ConsoleObserver: tells the user on stderr what the run did.

stdout carries only the cost and time lines printed by the CLI, so every
line here goes to stderr.
"""

from __future__ import annotations

import sys
from typing import TextIO

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


class ConsoleObserver:
    """Prints one line per domain event.

    Example output::

        Loaded 12 vertices from poly.bin
        Triangulated 12 vertices into 10 triangles on 4 worker(s) (float32): cost 38.2
        Wrote result to out.bin
        Finished run_20261019_101500 in 2.114s

    Args:
        verbose: Also print a ``[i/N] Stage (t)`` line after each stage.
        stream: Where to write; defaults to ``sys.stderr`` at write time.
    """

    def __init__(self, verbose: bool = False, stream: TextIO | None = None) -> None:
        self._verbose = verbose
        self._stream = stream
        self._n_stages = 0

    def on_event(self, event: RunEvent) -> None:
        line = self._format(event)
        if line is not None:
            stream = self._stream or sys.stderr
            stream.write(line + "\n")
            stream.flush()

    def _format(self, event: RunEvent) -> str | None:
        if isinstance(event, RunStarted):
            self._n_stages = event.n_stages
            return None
        if isinstance(event, StageFinished):
            if not self._verbose:
                return None
            return (
                f"[{event.stage_index + 1}/{self._n_stages}] "
                f"{event.stage_name} ({event.elapsed_seconds:.3f}s)"
            )
        if isinstance(event, ProblemLoaded):
            return f"Loaded {event.n_points} vertices from {event.source}"
        if isinstance(event, TriangulationSolved):
            return (
                f"Triangulated {event.n_points} vertices into "
                f"{event.n_triangles} triangles on {event.workers} worker(s) "
                f"({event.dtype}): cost {event.cost:.6g}"
            )
        if isinstance(event, ResultWritten):
            return f"Wrote result to {event.path}"
        if isinstance(event, ImageRendered):
            return f"Rendered image to {event.path}"
        if isinstance(event, RunFinished):
            return f"Finished {event.run_id} in {event.elapsed_seconds:.3f}s"
        if isinstance(event, RunFailed):
            return (
                f"Run failed in {event.stage_name} after "
                f"{event.elapsed_seconds:.3f}s: {event.error}"
            )
        return None


__all__ = ["ConsoleObserver"]
