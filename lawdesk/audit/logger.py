"""
Audit Logger

DESIGN DECISION: Every accepted command and every rejected input is logged.
This provides:
1. Traceability of every change to client accounts
2. Debugging capability for imports, restores and sync
3. A recent-activity panel in the UI

The audit logger:
- Is synchronous; commands already run under the controller lock
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from lawdesk.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from lawdesk.services.storage.interface import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (the in-app activity history)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for recent events.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("lawdesk.audit")

    def log(self, event: AuditEvent, correlation_id: Optional[UUID] = None) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()
        if correlation_id is not None:
            log_dict["correlation_id"] = str(correlation_id)

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events first; empty when no storage is configured."""
        if self._storage is None:
            return []
        return self._storage.get_recent_events(limit=limit)

    def log_client_registered(
        self,
        client_id: UUID,
        name: str,
        initial_fee: Decimal,
    ) -> None:
        """Log a new client file."""
        self.log(AuditEventBuilder.client_registered(
            client_id=client_id,
            name=name,
            initial_fee=str(initial_fee),
        ))

    def log_client_deleted(self, client_id: UUID, name: str) -> None:
        self.log(AuditEventBuilder.client_deleted(client_id=client_id, name=name))

    def log_ledger_entry(
        self,
        added: bool,
        client_id: UUID,
        entry_id: UUID,
        desc: str,
        amount: Decimal,
    ) -> None:
        """Log a ledger entry being appended or removed."""
        build = (
            AuditEventBuilder.ledger_entry_added if added
            else AuditEventBuilder.ledger_entry_deleted
        )
        self.log(build(
            client_id=client_id,
            entry_id=entry_id,
            desc=desc,
            amount=str(amount),
        ))

    def log_record_changed(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        label: str,
    ) -> None:
        self.log(AuditEventBuilder.record_changed(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            label=label,
        ))

    def log_document_generated(
        self,
        doc_type: str,
        doc_no: str,
        customer: str,
        total: Decimal,
        line_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a generated document."""
        self.log(
            AuditEventBuilder.document_generated(
                doc_type=doc_type,
                doc_no=doc_no,
                customer=customer,
                total=str(total),
                line_count=line_count,
            ),
            correlation_id=correlation_id,
        )

    def log_document_rejected(
        self,
        doc_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log document validation failure."""
        self.log(
            AuditEventBuilder.document_rejected(doc_type=doc_type, issues=issues),
            correlation_id=correlation_id,
        )

    def log_collection_imported(
        self,
        collection: str,
        source: str,
        previous_count: int,
        imported_count: int,
    ) -> None:
        self.log(AuditEventBuilder.collection_imported(
            collection=collection,
            source=source,
            previous_count=previous_count,
            imported_count=imported_count,
        ))

    def log_import_failed(self, collection: str, error_message: str) -> None:
        self.log(AuditEventBuilder.import_failed(
            collection=collection,
            error_message=error_message,
        ))

    def log_backup_restored(self, client_count: int, pjs_count: int) -> None:
        self.log(AuditEventBuilder.backup_restored(
            client_count=client_count,
            pjs_count=pjs_count,
        ))

    def log_restore_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.restore_failed(error_message=error_message))

    def log_share_token_rejected(self, error_message: str) -> None:
        self.log(AuditEventBuilder.share_token_rejected(error_message=error_message))

    def log_settings_changed(self, setting: str, value: str) -> None:
        self.log(AuditEventBuilder.settings_changed(setting=setting, value=value))

    def log_state_load_failed(self, source: str, error_message: str) -> None:
        self.log(AuditEventBuilder.state_load_failed(
            source=source,
            error_message=error_message,
        ))

    def log_state_save_failed(self, action: str, error_message: str) -> None:
        self.log(AuditEventBuilder.state_save_failed(
            action=action,
            error_message=error_message,
        ))

    def log_mirror_push_failed(self, kind: str, error_message: str) -> None:
        """Log a remote spreadsheet push that was dropped."""
        self.log(AuditEventBuilder.mirror_push_failed(
            kind=kind,
            error_message=error_message,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., generating a document).
    Pass it through all subsequent operations.
    """
    return uuid4()
