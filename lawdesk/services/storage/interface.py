"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for the three storage
concerns of the app:
1. The durable store that holds the whole AppState
2. The remote mirror that receives a copy of newly created records
3. The audit store behind the activity panel

This keeps the controller decoupled from the JSON file and from Google
Sheets, and lets tests run entirely in memory.

CRITICAL: The durable store is the source of truth. The remote mirror is
write-only and best-effort; nothing is ever read back from it.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from lawdesk.models.audit import AuditEvent
from lawdesk.models.practice import AppState


class RecordKind(str, Enum):
    """Record kinds pushed to the remote mirror, one worksheet each."""
    GUAMAN = "GUAMAN"
    PJS = "PJS"
    DOCUMENT = "DOCUMENT"


class StateStoreInterface(ABC):
    """
    Abstract interface for the durable application-state store.

    The whole AppState is saved and loaded as one unit.
    """

    @abstractmethod
    def load(self) -> AppState:
        """
        Load the last saved state.

        Returns:
            The stored state, or a default AppState when nothing usable
            is stored. Never raises for a missing or corrupt store.
        """
        pass

    @abstractmethod
    def save(self, state: AppState) -> None:
        """
        Persist the full state synchronously.

        Args:
            state: The state to save

        Raises:
            StorageError: If the write fails
        """
        pass


class RemoteMirrorInterface(ABC):
    """
    Abstract interface for the one-way remote mirror.

    Implementations may block; callers that must not block wrap them
    in a BackgroundMirror.
    """

    @abstractmethod
    def push_record(self, kind: RecordKind, fields: dict[str, Any]) -> None:
        """
        Append one record to the mirror.

        Args:
            kind: Which collection the record belongs to
            fields: Column name to value, in column order

        Raises:
            StorageError: If the push fails
        """
        pass

    def close(self) -> None:
        """Release any background resources. No-op by default."""
        return None


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'client', 'document')
            entity_id: The entity's ID or reference number

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StateWriteError(StorageError):
    """The durable store could not be written."""
    pass


class MirrorPushError(StorageError):
    """A record could not be appended to the remote mirror."""
    pass


class MirrorConnectionError(StorageError):
    """Could not connect to the remote mirror backend."""
    pass
