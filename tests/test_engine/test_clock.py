"""Tests for the virtual and threading schedulers."""

import threading

import pytest

from quizfunnel.engine.clock import ThreadingScheduler, VirtualScheduler


class TestVirtualScheduler:
    def test_nothing_runs_until_advanced(self):
        sched = VirtualScheduler()
        calls = []
        sched.call_later(1.0, lambda: calls.append("a"))
        assert calls == []
        assert sched.pending == 1

    def test_runs_due_callbacks_in_time_order(self):
        sched = VirtualScheduler()
        calls = []
        sched.call_later(0.3, lambda: calls.append("late"))
        sched.call_later(0.1, lambda: calls.append("early"))
        sched.call_later(5.0, lambda: calls.append("much later"))
        assert sched.advance(1.0) == 2
        assert calls == ["early", "late"]
        assert sched.now == 1.0

    def test_ties_run_in_scheduling_order(self):
        sched = VirtualScheduler()
        calls = []
        sched.call_later(0.5, lambda: calls.append(1))
        sched.call_later(0.5, lambda: calls.append(2))
        sched.advance(0.5)
        assert calls == [1, 2]

    def test_cancelled_callback_skipped(self):
        sched = VirtualScheduler()
        calls = []
        handle = sched.call_later(0.1, lambda: calls.append("x"))
        handle.cancel()
        assert sched.pending == 0
        sched.advance(1.0)
        assert calls == []

    def test_nested_scheduling_within_window(self):
        sched = VirtualScheduler()
        times = []

        def tick():
            times.append(sched.now)
            if len(times) < 5:
                sched.call_later(0.25, tick)

        sched.call_later(0.25, tick)
        sched.advance(1.0)
        assert times == [0.25, 0.5, 0.75, 1.0]

    def test_run_until_idle(self):
        sched = VirtualScheduler()
        calls = []
        sched.call_later(10, lambda: calls.append("a"))
        sched.call_later(20, lambda: calls.append("b"))
        assert sched.run_until_idle() == 2
        assert sched.now == 20
        assert sched.pending == 0

    def test_run_until_idle_guards_against_endless_rescheduling(self):
        sched = VirtualScheduler()

        def forever():
            sched.call_later(1, forever)

        sched.call_later(1, forever)
        with pytest.raises(RuntimeError):
            sched.run_until_idle(max_callbacks=50)


class TestThreadingScheduler:
    def test_callback_runs_on_timer(self):
        done = threading.Event()
        ThreadingScheduler().call_later(0.01, done.set)
        assert done.wait(timeout=5)

    def test_cancel_prevents_callback(self):
        fired = threading.Event()
        handle = ThreadingScheduler().call_later(0.2, fired.set)
        handle.cancel()
        assert not fired.wait(timeout=0.4)
