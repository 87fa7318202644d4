"""Synchronous event bus for quiz session lifecycle events.

Listeners run on the thread that emits, which for analysis progress is a
scheduler thread. A listener that raises is logged and skipped so that the
session emitting the event keeps its state machine consistent.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class EventBus:
    """Publish-subscribe bus keyed by event class.

    Global listeners (:meth:`on_all`) see every event before the typed
    listeners for that event's class, each group in registration order.
    """

    def __init__(self) -> None:
        self._listeners: dict[type, list[Listener]] = {}
        self._global_listeners: list[Listener] = []

    def subscribe(self, event_type: type, callback: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: type, callback: Listener) -> None:
        """Remove *callback* for *event_type*; unknown callbacks are ignored."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def on_all(self, callback: Listener) -> None:
        self._global_listeners.append(callback)

    def emit(self, event: Any) -> int:
        """Deliver *event* to every matching listener.

        Returns the number of listeners that raised. Their exceptions are
        logged and never reach the emitter.
        """
        failures = 0
        targets = [*self._global_listeners, *self._listeners.get(type(event), ())]
        for callback in targets:
            try:
                callback(event)
            except Exception:
                failures += 1
                logger.exception(
                    "Listener %r failed on %s", callback, type(event).__name__
                )
        return failures
