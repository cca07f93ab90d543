"""
In-Memory Audit Storage

Keeps the most recent audit events for the activity panel. Older events
fall off the end; the structured log keeps the full history.
"""

import threading
from collections import deque

from lawdesk.models.audit import AuditEvent
from lawdesk.services.storage.interface import AuditStorageInterface


class InMemoryAuditStorage(AuditStorageInterface):
    """Bounded, thread-safe audit history."""

    def __init__(self, max_events: int = 200):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        with self._lock:
            return [
                event for event in self._events
                if event.entity_type == entity_type and event.entity_id == str(entity_id)
            ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        with self._lock:
            events = list(self._events)
        events.reverse()
        return events[:limit]

    def __len__(self) -> int:
        return len(self._events)
