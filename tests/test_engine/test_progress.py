"""Tests for the two-phase progress simulator."""

import random
import threading

import pytest

from quizfunnel.config import ProgressConfig
from quizfunnel.engine.clock import ThreadingScheduler, VirtualScheduler
from quizfunnel.engine.progress import Phase, ProgressSimulator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _Recorder:
    def __init__(self, sched: VirtualScheduler) -> None:
        self.sched = sched
        self.reports: list[tuple[float, int, Phase]] = []
        self.completions = 0

    def progress(self, percent: int, phase: Phase) -> None:
        self.reports.append((self.sched.now, percent, phase))

    def complete(self) -> None:
        self.completions += 1

    @property
    def percents(self) -> list[int]:
        return [p for _, p, _ in self.reports]


def _simulator(pause_at=90, seed=7, **kwargs):
    sched = VirtualScheduler()
    rec = _Recorder(sched)
    sim = ProgressSimulator(
        sched,
        pause_at=pause_at,
        on_progress=rec.progress,
        on_complete=rec.complete,
        rng=random.Random(seed),
        **kwargs,
    )
    return sim, sched, rec


# ---------------------------------------------------------------------------
# Full run
# ---------------------------------------------------------------------------

class TestFullRun:
    @pytest.mark.parametrize("seed", [0, 1, 2, 42, 1234])
    def test_monotonic_and_bounded(self, seed):
        sim, sched, rec = _simulator(pause_at=85, seed=seed)
        sim.start()
        sched.run_until_idle()
        percents = rec.percents
        assert percents[0] == 0
        assert percents == sorted(percents)
        assert max(percents) == 100
        assert percents[-1] == 100

    def test_never_above_pause_at_before_dwell(self):
        sim, sched, rec = _simulator(pause_at=60)
        sim.start()
        sched.run_until_idle()
        for _, percent, phase in rec.reports:
            if phase in (Phase.RAMP_TO_THRESHOLD, Phase.DWELL):
                assert percent <= 60

    def test_dwells_at_pause_at(self):
        sim, sched, rec = _simulator(pause_at=85)
        sim.start()
        sched.run_until_idle()
        reached = next(t for t, p, _ in rec.reports if p == 85)
        resumed = next(t for t, _, ph in rec.reports if ph is Phase.RAMP_TO_COMPLETE)
        assert resumed - reached >= ProgressConfig().dwell_seconds

    def test_completes_exactly_once(self):
        sim, sched, rec = _simulator()
        sim.start()
        sched.run_until_idle()
        assert rec.completions == 1
        assert sim.phase is Phase.DONE
        assert sim.percent == 100
        assert sched.pending == 0

    def test_not_complete_before_100(self):
        sim, sched, rec = _simulator()
        sim.start()
        sched.advance(1.0)
        assert rec.completions == 0
        assert sim.running

    def test_pause_at_100(self):
        sim, sched, rec = _simulator(pause_at=100)
        sim.start()
        sched.run_until_idle()
        assert rec.completions == 1
        assert rec.percents[-1] == 100


class TestPauseAtDefaults:
    def test_default_from_config(self):
        sim, _, _ = _simulator(pause_at=None)
        assert sim.pause_at == 90

    def test_clamped_into_range(self):
        assert _simulator(pause_at=150)[0].pause_at == 100
        assert _simulator(pause_at=0)[0].pause_at == 1


class TestDurationDrivenRamp:
    def test_reaches_pause_at_after_share_of_duration(self):
        # 3000 ms * 0.7 = 2.1 s of 0.1 s ticks
        sim, sched, rec = _simulator(pause_at=90, duration_ms=3000)
        sim.start()
        sched.advance(1.95)
        assert sim.phase is Phase.RAMP_TO_THRESHOLD
        assert sim.percent < 90
        sched.advance(0.4)
        assert sim.phase is Phase.DWELL
        assert sim.percent == 90

    def test_fixed_increment(self):
        sim, sched, rec = _simulator(pause_at=90, duration_ms=3000)
        sim.start()
        sched.advance(0.55)
        # five ticks of 90 / 21
        assert rec.percents[-1] == round(5 * 90 / 21)


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

class TestCancellation:
    def test_cancel_mid_ramp(self):
        sim, sched, rec = _simulator()
        sim.start()
        sched.advance(0.5)
        sim.cancel()
        sched.run_until_idle()
        assert rec.completions == 0
        assert sim.phase is Phase.CANCELLED
        assert sched.pending == 0

    def test_cancel_during_dwell(self):
        sim, sched, rec = _simulator(pause_at=10, duration_ms=100)
        sim.start()
        sched.advance(0.2)
        assert sim.phase is Phase.DWELL
        sim.cancel()
        sched.run_until_idle()
        assert rec.completions == 0

    def test_no_reports_after_cancel(self):
        sim, sched, rec = _simulator()
        sim.start()
        sched.advance(0.3)
        sim.cancel()
        count = len(rec.reports)
        sched.run_until_idle()
        assert len(rec.reports) == count

    def test_cancel_after_done_keeps_done(self):
        sim, sched, rec = _simulator()
        sim.start()
        sched.run_until_idle()
        sim.cancel()
        assert sim.phase is Phase.DONE

    def test_restart_cancels_previous_run(self):
        sim, sched, rec = _simulator()
        sim.start()
        sched.advance(0.5)
        sim.start()
        assert sim.percent == 0
        sched.run_until_idle()
        assert rec.completions == 1


class TestWallClock:
    def test_completes_on_threading_scheduler(self):
        done = threading.Event()
        config = ProgressConfig(
            ramp_interval=0.001, dwell_seconds=0.01, finish_interval=0.001, min_step=5
        )
        sim = ProgressSimulator(
            ThreadingScheduler(), pause_at=50, config=config, on_complete=done.set
        )
        sim.start()
        assert done.wait(timeout=10)
        assert sim.percent == 100
