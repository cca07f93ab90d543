"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the
durable state store, the remote spreadsheet mirror and the audit history.
"""

from lawdesk.services.storage.interface import (
    AuditStorageInterface,
    MirrorConnectionError,
    MirrorPushError,
    RecordKind,
    RemoteMirrorInterface,
    StateStoreInterface,
    StateWriteError,
    StorageError,
)
from lawdesk.services.storage.audit_store import InMemoryAuditStorage
from lawdesk.services.storage.json_store import JsonFileStateStore
from lawdesk.services.storage.mirror import BackgroundMirror, NullMirror
from lawdesk.services.storage.google_sheets import (
    KIND_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsMirror,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordKind",
    "RemoteMirrorInterface",
    "StateStoreInterface",
    # Exceptions
    "MirrorConnectionError",
    "MirrorPushError",
    "StateWriteError",
    "StorageError",
    # Local implementations
    "InMemoryAuditStorage",
    "JsonFileStateStore",
    # Mirrors
    "BackgroundMirror",
    "NullMirror",
    # Google Sheets implementation
    "KIND_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsMirror",
]
