"""
Audit Models for Lawdesk

Every accepted command and every rejected input is recorded as an
AuditEvent. This gives:
1. Traceability of every change to client accounts
2. Debugging information when an import or restore goes wrong
3. A visible activity history in the UI

Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Clients and ledgers
    CLIENT_REGISTERED = "client_registered"
    CLIENT_DELETED = "client_deleted"
    LEDGER_ENTRY_ADDED = "ledger_entry_added"
    LEDGER_ENTRY_DELETED = "ledger_entry_deleted"

    # Notarization records and services
    PJS_RECORD_ADDED = "pjs_record_added"
    PJS_RECORD_DELETED = "pjs_record_deleted"
    SERVICE_ADDED = "service_added"
    SERVICE_DELETED = "service_deleted"

    # Documents
    DOCUMENT_GENERATED = "document_generated"
    DOCUMENT_REJECTED = "document_rejected"

    # Bulk operations
    COLLECTION_IMPORTED = "collection_imported"
    IMPORT_FAILED = "import_failed"
    BACKUP_RESTORED = "backup_restored"
    RESTORE_FAILED = "restore_failed"

    # Sharing
    SHARE_TOKEN_REJECTED = "share_token_rejected"

    # Settings
    SETTINGS_CHANGED = "settings_changed"

    # System events
    STATE_LOAD_FAILED = "state_load_failed"
    STATE_SAVE_FAILED = "state_save_failed"
    MIRROR_PUSH_FAILED = "mirror_push_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every accepted command creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'client', 'pjs_record', 'document')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID or reference number of the entity"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.client_registered(client_id, name, fee)
        event = AuditEventBuilder.document_generated("RECEIPT", "RES-20240001", ...)
    """

    @staticmethod
    def client_registered(
        client_id: UUID,
        name: str,
        initial_fee: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLIENT_REGISTERED,
            entity_type="client",
            entity_id=str(client_id),
            description=f"Client registered: {name}",
            details={
                "name": name,
                "initial_fee": initial_fee,
            },
            is_user_action=True,
        )

    @staticmethod
    def client_deleted(client_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLIENT_DELETED,
            entity_type="client",
            entity_id=str(client_id),
            description=f"Client deleted: {name}",
            is_user_action=True,
        )

    @staticmethod
    def ledger_entry_added(
        client_id: UUID,
        entry_id: UUID,
        desc: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_ENTRY_ADDED,
            entity_type="client",
            entity_id=str(client_id),
            description=f"Ledger entry added: {desc} ({amount})",
            details={
                "entry_id": str(entry_id),
                "desc": desc,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def ledger_entry_deleted(
        client_id: UUID,
        entry_id: UUID,
        desc: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_ENTRY_DELETED,
            entity_type="client",
            entity_id=str(client_id),
            description=f"Ledger entry deleted: {desc} ({amount})",
            details={
                "entry_id": str(entry_id),
                "desc": desc,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        label: str,
    ) -> AuditEvent:
        """PJS record and service additions/removals share one shape."""
        verb = "added" if event_type.value.endswith("_added") else "deleted"
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=str(entity_id),
            description=f"{entity_type.replace('_', ' ').capitalize()} {verb}: {label}",
            is_user_action=True,
        )

    @staticmethod
    def document_generated(
        doc_type: str,
        doc_no: str,
        customer: str,
        total: str,
        line_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_GENERATED,
            entity_type="document",
            entity_id=doc_no,
            description=f"{doc_type.capitalize()} {doc_no} generated for {customer}",
            details={
                "doc_type": doc_type,
                "customer": customer,
                "total": total,
                "line_count": line_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def document_rejected(
        doc_type: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            description=f"{doc_type.capitalize()} rejected with {len(issues)} issues",
            details={
                "doc_type": doc_type,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def collection_imported(
        collection: str,
        source: str,
        previous_count: int,
        imported_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_IMPORTED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            description=(
                f"{collection} replaced from {source}: "
                f"{previous_count} discarded, {imported_count} imported"
            ),
            details={
                "source": source,
                "previous_count": previous_count,
                "imported_count": imported_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_failed(collection: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            description=f"Import of {collection} rejected",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def backup_restored(client_count: int, pjs_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_RESTORED,
            severity=AuditSeverity.WARNING,
            entity_type="app_state",
            description=f"Backup restored: {client_count} clients, {pjs_count} PJS records",
            details={
                "client_count": client_count,
                "pjs_count": pjs_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def restore_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESTORE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="app_state",
            description="Backup restore rejected; current data kept",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def share_token_rejected(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_TOKEN_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="pjs_record",
            description="Shared PJS link could not be decoded",
            error_message=error_message,
        )

    @staticmethod
    def settings_changed(setting: str, value: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_CHANGED,
            entity_type="app_state",
            description=f"Setting changed: {setting}",
            details={setting: value},
            is_user_action=True,
        )

    @staticmethod
    def state_load_failed(source: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="app_state",
            description=f"Stored state could not be read from {source}; starting empty",
            error_message=error_message,
        )

    @staticmethod
    def state_save_failed(action: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="app_state",
            description=f"State could not be saved after {action}; previous state kept",
            error_message=error_message,
            details={
                "action": action,
            },
        )

    @staticmethod
    def mirror_push_failed(
        kind: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIRROR_PUSH_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Spreadsheet sync failed for {kind} record",
            error_message=error_message,
            details={
                "kind": kind,
            },
        )
