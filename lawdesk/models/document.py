"""
Document Models for Lawdesk

A Document is a transient, printable projection of practice data:
a receipt, invoice or quotation composed from ad-hoc line items, or an
account statement projected from a client's ledger.

Documents are a tagged union on `doc_type`. Each variant declares only
the fields it uses: receipts, invoices and quotations carry the
customer's phone/address, statements carry the covered period instead.
All variants share the same line-item and total shape.

CRITICAL: Documents are never stored in AppState. Producing one only
advances the shared document counter (for counter-based types).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, ClassVar, Literal, NamedTuple, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from lawdesk.models.practice import IsoDate, Money, ServiceItem


CASH_CUSTOMER = "PELANGGAN TUNAI"


# =============================================================================
# ENUMS
# =============================================================================

class DocumentType(str, Enum):
    """Kinds of printable documents."""
    RECEIPT = "RECEIPT"
    INVOICE = "INVOICE"
    QUOTATION = "QUOTATION"
    STATEMENT = "STATEMENT"

    @property
    def is_counter_based(self) -> bool:
        """Receipts, invoices and quotations share the persisted counter."""
        return self is not DocumentType.STATEMENT


class PrintMode(str, Enum):
    STANDARD = "standard"  # A5 letterhead
    THERMAL = "thermal"    # 80mm roll


class DocumentLabels(NamedTuple):
    """Fixed wording printed on a document type."""
    watermark: str
    type_label: str
    customer_label: str
    total_label: str
    footer_note: str


# =============================================================================
# DRAFT INPUT
# =============================================================================

class DraftItem(BaseModel):
    """
    A line being composed on the document page.

    Quantity is collapsed into the line amount when the document is built.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Line item name"
    )
    price: Money = Field(
        ...,
        description="Unit price; negative for credits"
    )
    quantity: int = Field(
        default=1,
        ge=0,
        description="Number of units"
    )

    @property
    def line_amount(self) -> Decimal:
        return self.price * self.quantity

    @property
    def label(self) -> str:
        if self.quantity > 1:
            return f"{self.name} (x{self.quantity})"
        return self.name

    @classmethod
    def from_service(cls, service: ServiceItem, quantity: int = 1) -> "DraftItem":
        return cls(name=service.name, price=service.price, quantity=quantity)


class Parties(BaseModel):
    """Who a document is addressed to."""
    model_config = ConfigDict(str_strip_whitespace=True)

    customer: str = Field(
        default="",
        description="Customer/payer name; validated as required before building"
    )
    phone: Optional[str] = None
    address: Optional[str] = None


# =============================================================================
# DOCUMENT VARIANTS
# =============================================================================

class DocumentLine(BaseModel):
    """One printed line: a label and a signed amount."""
    model_config = ConfigDict(frozen=True)

    label: str
    amount: Money

    @property
    def is_credit(self) -> bool:
        return self.amount < 0


class DocumentBase(BaseModel):
    """Shape shared by every document variant."""
    model_config = ConfigDict(frozen=True)

    default_title: ClassVar[str]
    labels: ClassVar[DocumentLabels]

    title: str
    customer: str
    doc_no: str
    date: IsoDate
    notes: Optional[str] = None
    lines: tuple[DocumentLine, ...] = ()
    total: Money


class PartyDocument(DocumentBase):
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None


class ReceiptDocument(PartyDocument):
    default_title: ClassVar[str] = "RESIT RASMI"
    labels: ClassVar[DocumentLabels] = DocumentLabels(
        watermark="OFFICIAL",
        type_label="RESIT RASMI",
        customer_label="Diterima Daripada / Received From:",
        total_label="JUMLAH DITERIMA / TOTAL RECEIVED",
        footer_note="Terima kasih atas urusan anda bersama firma kami.",
    )

    doc_type: Literal[DocumentType.RECEIPT] = DocumentType.RECEIPT


class InvoiceDocument(PartyDocument):
    default_title: ClassVar[str] = "INVOIS"
    labels: ClassVar[DocumentLabels] = DocumentLabels(
        watermark="INVOICE",
        type_label="INVOIS",
        customer_label="Bil Kepada / Bill To:",
        total_label="JUMLAH PERLU DIBAYAR",
        footer_note="Terma Pembayaran: Tunai/Cek atas nama {firm}.",
    )

    doc_type: Literal[DocumentType.INVOICE] = DocumentType.INVOICE


class QuotationDocument(PartyDocument):
    default_title: ClassVar[str] = "SEBUTHARGA"
    labels: ClassVar[DocumentLabels] = DocumentLabels(
        watermark="QUOTATION",
        type_label="SEBUTHARGA",
        customer_label="Sebut Harga Kepada / To:",
        total_label="JUMLAH SEBUTHARGA",
        footer_note="Sebut harga ini sah untuk tempoh 30 hari dari tarikh yang tertera.",
    )

    doc_type: Literal[DocumentType.QUOTATION] = DocumentType.QUOTATION


class StatementDocument(DocumentBase):
    """Account statement projected from a client's ledger."""
    default_title: ClassVar[str] = "PENYATA AKAUN FAIL"
    labels: ClassVar[DocumentLabels] = DocumentLabels(
        watermark="STATEMENT",
        type_label="PENYATA AKAUN",
        customer_label="Penyata Akaun Fail Bagi:",
        total_label="BAKI TERTUNGGAK KESELURUHAN",
        footer_note="Sila jelaskan baki tertunggak dalam tempoh 14 hari dari tarikh penyata ini.",
    )

    doc_type: Literal[DocumentType.STATEMENT] = DocumentType.STATEMENT
    period_start: Optional[IsoDate] = None
    period_end: Optional[IsoDate] = None


Document = Annotated[
    Union[ReceiptDocument, InvoiceDocument, QuotationDocument, StatementDocument],
    Field(discriminator="doc_type"),
]

DOCUMENT_CLASSES: dict[DocumentType, type[DocumentBase]] = {
    DocumentType.RECEIPT: ReceiptDocument,
    DocumentType.INVOICE: InvoiceDocument,
    DocumentType.QUOTATION: QuotationDocument,
    DocumentType.STATEMENT: StatementDocument,
}


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'empty')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggestion for fixing the issue"
    )


class ValidationResult(BaseModel):
    """Result of validating a document request before it is built."""

    validation_id: UUID = Field(default_factory=uuid4)
    validated_at: datetime = Field(default_factory=datetime.utcnow)
    doc_type: DocumentType
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def first_error(self) -> Optional[ValidationIssue]:
        for issue in self.issues:
            if issue.severity == "error":
                return issue
        return None
