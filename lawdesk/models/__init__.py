"""
Data Models Package

This package contains all Pydantic models used in Lawdesk.
All data flowing through the system must conform to these schemas.
"""

from lawdesk.models.practice import (
    FEE_APPROVED_DESC,
    IMPORTED_BALANCE_DESC,
    UNNAMED,
    AppState,
    Client,
    LedgerEntry,
    PageId,
    PjsRecord,
    ServiceItem,
    ThemeMode,
    normalize_date,
    quantize_money,
    today_iso,
)
from lawdesk.models.document import (
    CASH_CUSTOMER,
    DOCUMENT_CLASSES,
    Document,
    DocumentBase,
    DocumentLabels,
    DocumentLine,
    DocumentType,
    DraftItem,
    InvoiceDocument,
    Parties,
    PrintMode,
    QuotationDocument,
    ReceiptDocument,
    StatementDocument,
    ValidationIssue,
    ValidationResult,
)
from lawdesk.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Practice models
    "FEE_APPROVED_DESC",
    "IMPORTED_BALANCE_DESC",
    "UNNAMED",
    "AppState",
    "Client",
    "LedgerEntry",
    "PageId",
    "PjsRecord",
    "ServiceItem",
    "ThemeMode",
    "normalize_date",
    "quantize_money",
    "today_iso",
    # Document models
    "CASH_CUSTOMER",
    "DOCUMENT_CLASSES",
    "Document",
    "DocumentBase",
    "DocumentLabels",
    "DocumentLine",
    "DocumentType",
    "DraftItem",
    "InvoiceDocument",
    "Parties",
    "PrintMode",
    "QuotationDocument",
    "ReceiptDocument",
    "StatementDocument",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
