"""Schedulers: the single cancellable delayed-call abstraction.

The progress simulator never sleeps. It asks a :class:`Scheduler` to call it
back later and keeps the returned handle so that pending ticks can be
cancelled. :class:`ThreadingScheduler` runs callbacks on timer threads;
:class:`VirtualScheduler` runs them only when the owner advances its clock.
"""

from __future__ import annotations

import heapq
import itertools
import threading
from typing import Callable, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run *callback* after *delay* seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle: ...


# ---------------------------------------------------------------------------
# Wall clock
# ---------------------------------------------------------------------------


class ThreadingScheduler:
    """Runs each callback on a daemon :class:`threading.Timer`."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(delay, 0.0), callback)
        timer.daemon = True
        timer.start()
        return timer


# ---------------------------------------------------------------------------
# Virtual clock
# ---------------------------------------------------------------------------


class VirtualHandle:
    def __init__(self, due: float) -> None:
        self.due = due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Deterministic scheduler driven by :meth:`advance`.

    Callbacks run in due-time order, ties in scheduling order. Callbacks
    scheduled by other callbacks run within the same :meth:`advance` call
    if they fall due before its end.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, VirtualHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> VirtualHandle:
        handle = VirtualHandle(self.now + max(delay, 0.0))
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward by *seconds*, running every due callback.

        Returns the number of callbacks run.
        """
        end = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= end:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, due)
            callback()
            ran += 1
        self.now = end
        return ran

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        """Run callbacks in order until nothing is pending.

        Raises RuntimeError if *max_callbacks* is exceeded, which means
        something keeps rescheduling itself forever.
        """
        ran = 0
        while self._queue:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = max(self.now, due)
            callback()
            ran += 1
            if ran > max_callbacks:
                raise RuntimeError(f"Scheduler still busy after {max_callbacks} callbacks")
        return ran
