"""
Deferred Actions

Two UI transitions run after a short delay: clearing the open ledger
(300 ms after a close request) and auto-printing a new document
(600 ms after it is shown). Both are cancellable.

The scheduler is injectable so tests can fire timers by hand.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

import structlog


logger = structlog.get_logger(__name__)


class ScheduledHandle(ABC):
    """A pending callback that can be cancelled before it runs."""

    @abstractmethod
    def cancel(self) -> None:
        pass


class Scheduler(ABC):
    """Runs a callback once after a delay."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledHandle:
        pass


class _TimerHandle(ScheduledHandle):
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler(Scheduler):
    """Scheduler backed by daemon threading.Timer threads."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledHandle:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return _TimerHandle(timer)


class DeferredAction:
    """
    One named action that is pending at most once.

    Scheduling again while pending cancels the earlier timer and re-arms,
    so the action runs once, `delay_ms` after the latest request.
    """

    def __init__(
        self,
        name: str,
        scheduler: Scheduler,
        delay_ms: int,
        action: Callable[[], None],
    ):
        self._name = name
        self._scheduler = scheduler
        self._delay_ms = delay_ms
        self._action = action
        self._handle: Optional[ScheduledHandle] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            generation = self._generation
            self._handle = self._scheduler.call_later(
                self._delay_ms,
                lambda: self._fire(generation),
            )
        logger.debug("deferred_action_scheduled", action=self._name, delay_ms=self._delay_ms)

    def cancel(self) -> bool:
        """Cancel a pending run. Returns True if one was pending."""
        with self._lock:
            if self._handle is None:
                return False
            self._handle.cancel()
            self._handle = None
            self._generation += 1
        logger.debug("deferred_action_cancelled", action=self._name)
        return True

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer cancelled too late to stop its thread must not run
            if generation != self._generation or self._handle is None:
                return
            self._handle = None
        try:
            self._action()
        except Exception as e:
            logger.error("deferred_action_failed", action=self._name, error=str(e))
