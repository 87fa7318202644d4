"""Two-phase progress simulator for the "analysing your answers" screen.

The simulator is an explicit state machine advanced one scheduled tick at a
time::

    IDLE -> RAMP_TO_THRESHOLD -> DWELL -> RAMP_TO_COMPLETE -> DONE
                     \\______________\\____________\\___-> CANCELLED

Only one tick is ever pending. Cancelling drops it and bumps the run
generation so that a tick already in flight on another thread is ignored.
"""

from __future__ import annotations

import logging
import random
import threading
from enum import StrEnum
from typing import Callable

from quizfunnel.config import ProgressConfig
from quizfunnel.engine.clock import Handle, Scheduler

logger = logging.getLogger(__name__)


class Phase(StrEnum):
    IDLE = "idle"
    RAMP_TO_THRESHOLD = "ramp_to_threshold"
    DWELL = "dwell"
    RAMP_TO_COMPLETE = "ramp_to_complete"
    DONE = "done"
    CANCELLED = "cancelled"


ProgressCallback = Callable[[int, Phase], None]


class ProgressSimulator:
    """Reports a non-decreasing integer percentage from 0 to 100.

    Args:
        scheduler: Source of delayed calls.
        pause_at: Percentage held during the dwell, clamped into 1..100.
            Defaults to ``config.default_pause_at``.
        on_progress: Called with ``(percent, phase)`` on every tick.
        on_complete: Called once when 100% is reached.
        config: Timing parameters.
        rng: Random source for the tick increments.
        duration_ms: When set, phase 1 advances by a fixed increment so that
            ``pause_at`` is reached after ``duration_ms * duration_ramp_share``.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        pause_at: int | None = None,
        on_progress: ProgressCallback | None = None,
        on_complete: Callable[[], None] | None = None,
        config: ProgressConfig | None = None,
        rng: random.Random | None = None,
        duration_ms: int | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._config = config or ProgressConfig()
        target = self._config.default_pause_at if pause_at is None else pause_at
        self.pause_at = min(max(int(target), 1), 100)
        self._on_progress = on_progress
        self._on_complete = on_complete
        self._rng = rng or random.Random()
        self._duration_ms = duration_ms if duration_ms and duration_ms > 0 else None

        self._lock = threading.Lock()
        self._generation = 0
        self._handle: Handle | None = None
        self._value = 0.0
        self.phase = Phase.IDLE
        self.percent = 0

    @property
    def running(self) -> bool:
        return self.phase in (Phase.RAMP_TO_THRESHOLD, Phase.DWELL, Phase.RAMP_TO_COMPLETE)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start from zero, dropping any run already in progress."""
        with self._lock:
            generation = self._reset(Phase.RAMP_TO_THRESHOLD)
            self._schedule(self._config.ramp_interval, generation)
        self._report(0, Phase.RAMP_TO_THRESHOLD)

    def cancel(self) -> None:
        """Drop the pending tick. ``on_complete`` will not fire for this run."""
        with self._lock:
            if self.phase is Phase.DONE:
                return
            self._drop_pending()
            self._generation += 1
            if self.phase is not Phase.IDLE:
                self.phase = Phase.CANCELLED

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self, phase: Phase) -> int:
        self._drop_pending()
        self._generation += 1
        self._value = 0.0
        self.percent = 0
        self.phase = phase
        return self._generation

    def _drop_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self, delay: float, generation: int) -> None:
        self._handle = self._scheduler.call_later(delay, lambda: self._tick(generation))

    def _ramp_step(self) -> float:
        cfg = self._config
        if self._duration_ms is not None:
            ticks = self._duration_ms * cfg.duration_ramp_share / (cfg.ramp_interval * 1000)
            return self.pause_at / max(ticks, 1.0)
        return self._rng.uniform(cfg.min_step, cfg.ramp_max_step)

    def _finish_step(self) -> float:
        cfg = self._config
        return self._rng.uniform(cfg.min_step, cfg.finish_max_step)

    def _tick(self, generation: int) -> None:
        completed = False
        with self._lock:
            if generation != self._generation:
                return
            self._handle = None
            cfg = self._config

            if self.phase is Phase.RAMP_TO_THRESHOLD:
                self._value = min(float(self.pause_at), self._value + self._ramp_step())
                if self._value >= self.pause_at:
                    self.phase = Phase.DWELL
                    self._schedule(cfg.dwell_seconds, generation)
                else:
                    self._schedule(cfg.ramp_interval, generation)
            elif self.phase is Phase.DWELL:
                self.phase = Phase.RAMP_TO_COMPLETE
                self._schedule(cfg.finish_interval, generation)
                return
            elif self.phase is Phase.RAMP_TO_COMPLETE:
                self._value = min(100.0, self._value + self._finish_step())
                if self._value >= 100:
                    self.phase = Phase.DONE
                    completed = True
                else:
                    self._schedule(cfg.finish_interval, generation)
            else:
                return

            # round() of a non-decreasing value stays non-decreasing
            cap = self.pause_at if self.phase in (Phase.RAMP_TO_THRESHOLD, Phase.DWELL) else 100
            self.percent = max(self.percent, min(cap, round(self._value)))
            percent, phase = self.percent, self.phase

        self._report(percent, phase)
        if completed:
            logger.debug("Progress simulation complete")
            if self._on_complete is not None:
                self._on_complete()

    def _report(self, percent: int, phase: Phase) -> None:
        if self._on_progress is not None:
            self._on_progress(percent, phase)
