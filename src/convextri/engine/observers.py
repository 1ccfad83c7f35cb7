"""Observer protocol and the synchronous event bus of a pipeline run."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from convextri.engine.events import RunEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class Observer(Protocol):
    """Anything with an ``on_event(event)`` method.

    Observers only report. A run with no observers writes the same result
    file as a run with all of them.
    """

    def on_event(self, event: RunEvent) -> None: ...


class EventBus:
    """Delivers each event to every observer, in subscription order.

    An observer that raises is logged and skipped; the rest still receive
    the event and the run carries on.
    """

    def __init__(self, observers: list[Observer] | None = None) -> None:
        self._observers: list[Observer] = list(observers or [])

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def emit(self, event: RunEvent) -> None:
        for observer in self._observers:
            try:
                observer.on_event(event)
            except Exception:
                logger.warning(
                    "Observer %r failed on %s",
                    observer,
                    type(event).__name__,
                    exc_info=True,
                )


__all__ = ["EventBus", "Observer"]
