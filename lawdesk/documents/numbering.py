"""
Document Numbering

Receipts, invoices and quotations draw from one shared counter and are
numbered `{PREFIX}-{year}{counter:04d}`, e.g. `RES-20240007`.
Statements are numbered from the clock, `STMT-{epoch ms}`, and never
touch the counter.
"""

from datetime import date, datetime
from typing import Optional

from lawdesk.models.document import DocumentType


PREFIXES: dict[DocumentType, str] = {
    DocumentType.RECEIPT: "RES",
    DocumentType.INVOICE: "INV",
    DocumentType.QUOTATION: "QTN",
    DocumentType.STATEMENT: "STMT",
}


def next_reference(
    doc_type: DocumentType,
    counter: int,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Reference number for the next document of `doc_type`.

    Pure: the caller advances the counter only after the document has
    been built successfully.
    """
    prefix = PREFIXES[doc_type]

    if not doc_type.is_counter_based:
        moment = now or datetime.now()
        return f"{prefix}-{int(moment.timestamp() * 1000)}"

    if counter < 1:
        raise ValueError(f"Document counter must be >= 1, got {counter}")
    year = (today or date.today()).year
    return f"{prefix}-{year}{counter:04d}"


def parse_reference(doc_no: str) -> tuple[str, str]:
    """Split a reference into (prefix, suffix)."""
    prefix, _, suffix = doc_no.partition("-")
    if not suffix:
        raise ValueError(f"Not a document reference: {doc_no!r}")
    return prefix, suffix
