"""
Shared fixtures and in-memory fakes.

No test touches the network or the real data file: the durable store,
the remote mirror and the scheduler are all replaced here.
"""

from decimal import Decimal
from typing import Any, Callable, Optional

import pytest

from lawdesk.audit import AuditLogger
from lawdesk.config.settings import AppSettings, FirmSettings
from lawdesk.models.practice import AppState
from lawdesk.orchestrator import PracticeController
from lawdesk.scheduling import ScheduledHandle, Scheduler
from lawdesk.services.storage import (
    InMemoryAuditStorage,
    MirrorPushError,
    RecordKind,
    RemoteMirrorInterface,
    StateStoreInterface,
    StateWriteError,
)


class InMemoryStateStore(StateStoreInterface):
    """Durable store fake that records every save."""

    def __init__(self, initial: Optional[AppState] = None):
        self._initial = initial
        self.saved: list[AppState] = []
        self.fail_saves = False

    def load(self) -> AppState:
        return self._initial or AppState()

    def save(self, state: AppState) -> None:
        if self.fail_saves:
            raise StateWriteError("disk full")
        self.saved.append(state)

    @property
    def last_saved(self) -> Optional[AppState]:
        return self.saved[-1] if self.saved else None


class RecordingMirror(RemoteMirrorInterface):
    def __init__(self):
        self.pushes: list[tuple[RecordKind, dict[str, Any]]] = []
        self.closed = False

    def push_record(self, kind: RecordKind, fields: dict[str, Any]) -> None:
        self.pushes.append((kind, dict(fields)))

    def close(self) -> None:
        self.closed = True


class FailingMirror(RemoteMirrorInterface):
    def __init__(self):
        self.attempts = 0

    def push_record(self, kind: RecordKind, fields: dict[str, Any]) -> None:
        self.attempts += 1
        raise MirrorPushError("spreadsheet unavailable")


class _ManualTimer(ScheduledHandle):
    def __init__(self, due_ms: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler whose clock only moves when a test calls advance()."""

    def __init__(self):
        self.now_ms = 0
        self.timers: list[_ManualTimer] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledHandle:
        timer = _ManualTimer(self.now_ms + delay_ms, callback)
        self.timers.append(timer)
        return timer

    def advance(self, ms: int) -> None:
        self.now_ms += ms
        due = [
            timer for timer in self.timers
            if not timer.cancelled and not timer.fired and timer.due_ms <= self.now_ms
        ]
        for timer in sorted(due, key=lambda t: t.due_ms):
            timer.fired = True
            timer.callback()

    @property
    def fired_count(self) -> int:
        return sum(1 for timer in self.timers if timer.fired)

    @property
    def pending_count(self) -> int:
        return sum(1 for timer in self.timers if not timer.cancelled and not timer.fired)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        close_ledger_delay_ms=300,
        auto_print_delay_ms=600,
        mirror_documents=False,
    )


@pytest.fixture
def firm() -> FirmSettings:
    return FirmSettings(
        name="HAIRI MUSTAFA ASSOCIATES",
        tagline="Peguam Syarie & Pesuruhjaya Sumpah",
        address="Lot 02, Bangunan Arked Mara, 09100 Baling, Kedah Darul Aman",
        contact="Tel: +60 11 5653 1310",
    )


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def mirror() -> RecordingMirror:
    return RecordingMirror()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage(max_events=100)


@pytest.fixture
def printed() -> list:
    return []


@pytest.fixture
def controller(store, mirror, scheduler, audit_storage, app_settings, firm, printed) -> PracticeController:
    return PracticeController(
        store=store,
        mirror=mirror,
        audit_logger=AuditLogger(audit_storage),
        scheduler=scheduler,
        app_settings=app_settings,
        firm=firm,
        on_print=printed.append,
    )


@pytest.fixture
def fee() -> Decimal:
    return Decimal("1500.00")
