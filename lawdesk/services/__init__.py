"""Services package."""

from lawdesk.services.branding import (
    InvalidLogoError,
    LogoError,
    LogoTooLargeError,
    prepare_logo,
)
from lawdesk.services.storage import (
    AuditStorageInterface,
    BackgroundMirror,
    GoogleSheetsClient,
    GoogleSheetsMirror,
    InMemoryAuditStorage,
    JsonFileStateStore,
    NullMirror,
    RecordKind,
    RemoteMirrorInterface,
    StateStoreInterface,
    StorageError,
)

__all__ = [
    # Branding
    "InvalidLogoError",
    "LogoError",
    "LogoTooLargeError",
    "prepare_logo",
    # Storage services
    "AuditStorageInterface",
    "BackgroundMirror",
    "GoogleSheetsClient",
    "GoogleSheetsMirror",
    "InMemoryAuditStorage",
    "JsonFileStateStore",
    "NullMirror",
    "RecordKind",
    "RemoteMirrorInterface",
    "StateStoreInterface",
    "StorageError",
]
