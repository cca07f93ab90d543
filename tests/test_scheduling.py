"""Tests for deferred actions."""

import threading

from lawdesk.scheduling import DeferredAction, ThreadingScheduler

from conftest import ManualScheduler


class TestDeferredAction:

    def setup_method(self):
        self.scheduler = ManualScheduler()
        self.calls = []
        self.action = DeferredAction("test", self.scheduler, 300, lambda: self.calls.append(1))

    def test_runs_after_delay(self):
        self.action.schedule()
        assert self.action.pending

        self.scheduler.advance(299)
        assert self.calls == []

        self.scheduler.advance(1)
        assert self.calls == [1]
        assert not self.action.pending

    def test_reschedule_rearms(self):
        self.action.schedule()
        self.scheduler.advance(200)
        self.action.schedule()
        self.scheduler.advance(200)
        assert self.calls == []

        self.scheduler.advance(100)
        assert self.calls == [1]

    def test_cancel(self):
        self.action.schedule()

        assert self.action.cancel() is True
        self.scheduler.advance(1000)

        assert self.calls == []
        assert self.action.cancel() is False

    def test_stale_callback_ignored(self):
        """A timer that fires after cancellation does nothing."""
        self.action.schedule()
        stale = self.scheduler.timers[0].callback
        self.action.cancel()

        stale()

        assert self.calls == []

    def test_action_errors_contained(self):
        def boom():
            raise RuntimeError("boom")

        action = DeferredAction("boom", self.scheduler, 10, boom)
        action.schedule()
        self.scheduler.advance(10)

        assert not action.pending


class TestThreadingScheduler:

    def test_fires_on_timer_thread(self):
        fired = threading.Event()
        ThreadingScheduler().call_later(10, fired.set)
        assert fired.wait(timeout=5)

    def test_cancel_prevents_run(self):
        fired = threading.Event()
        handle = ThreadingScheduler().call_later(200, fired.set)
        handle.cancel()
        assert not fired.wait(timeout=0.5)
