"""
Document Projection

Turns ad-hoc line items or a client's ledger into an immutable Document.

CRITICAL: Validation runs before anything is built. A rejected request
raises a DocumentValidationError subclass and has no side effects; the
caller only advances the document counter after a document is returned.
"""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from lawdesk.ledger import balance, filter_by_date_range
from lawdesk.models.document import (
    CASH_CUSTOMER,
    DOCUMENT_CLASSES,
    DocumentBase,
    DocumentLine,
    DocumentType,
    DraftItem,
    Parties,
    StatementDocument,
)
from lawdesk.models.practice import Client
from lawdesk.validation import DocumentValidator


_validator = DocumentValidator()


def resolve_parties(parties: Parties, clients: Iterable[Client]) -> Parties:
    """
    Fill in a registered client's phone and address.

    Only blank fields are filled; the cash customer is never matched.
    """
    name = parties.customer.strip().upper()
    if not name or name == CASH_CUSTOMER:
        return parties
    for client in clients:
        if client.name == name:
            return parties.model_copy(update={
                "phone": parties.phone or client.phone,
                "address": parties.address or client.address,
            })
    return parties


def build_lines(items: Sequence[DraftItem]) -> tuple[DocumentLine, ...]:
    return tuple(
        DocumentLine(label=item.label, amount=item.line_amount)
        for item in items
    )


def build_document(
    kind: DocumentType,
    parties: Parties,
    items: Sequence[DraftItem],
    notes: Optional[str],
    doc_no: str,
    date: str,
    validator: Optional[DocumentValidator] = None,
) -> DocumentBase:
    """
    Build a receipt, invoice or quotation from draft items.

    Each line is labelled with the item name, plus ` (x{qty})` when the
    quantity is above 1, and carries unit price times quantity. The total
    is the sum of line amounts. Negative amounts are allowed.

    Raises:
        MissingCustomerError: customer name is blank
        EmptyItemListError: no items
    """
    if kind is DocumentType.STATEMENT:
        raise ValueError("Statements are built from a client ledger; use build_statement")

    validator = validator or _validator
    validator.raise_for_errors(validator.validate(kind, parties.customer, items))

    lines = build_lines(items)
    document_class = DOCUMENT_CLASSES[kind]
    return document_class(
        title=document_class.default_title,
        customer=parties.customer.strip(),
        customer_phone=parties.phone,
        customer_address=parties.address,
        doc_no=doc_no,
        date=date,
        notes=notes or None,
        lines=lines,
        total=sum((line.amount for line in lines), Decimal("0")),
    )


def build_statement(
    client: Client,
    doc_no: str,
    date: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    validator: Optional[DocumentValidator] = None,
) -> StatementDocument:
    """
    Project a client's ledger, optionally date-filtered, into a statement.

    One line per entry in ledger order, labelled `{date} - {desc}`. The
    total is the balance of the filtered entries; an empty period gives a
    statement with no lines and a zero total.

    Raises:
        MissingCustomerError: client name is blank
    """
    validator = validator or _validator
    validator.raise_for_errors(validator.validate(DocumentType.STATEMENT, client.name))

    entries = filter_by_date_range(client.ledger, start, end)
    lines = tuple(
        DocumentLine(label=f"{entry.date} - {entry.desc}", amount=entry.amt)
        for entry in entries
    )
    return StatementDocument(
        title=StatementDocument.default_title,
        customer=client.name,
        doc_no=doc_no,
        date=date,
        lines=lines,
        total=balance(entries),
        period_start=start or None,
        period_end=end or None,
    )
