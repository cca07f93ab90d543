"""
Tests for document validation, projection and rendering.

Test strategy:
1. Validation rejects before anything is built
2. Line labels and totals follow the quantity rule
3. Statements project the (filtered) ledger
4. Rendering is deterministic and escapes user text
"""

from decimal import Decimal

import pytest

from lawdesk.documents import (
    build_document,
    build_statement,
    print_script,
    render_document_html,
    resolve_parties,
)
from lawdesk.documents.render import format_amount
from lawdesk.ledger import add_entry
from lawdesk.models.document import (
    CASH_CUSTOMER,
    DocumentType,
    DraftItem,
    InvoiceDocument,
    Parties,
    PrintMode,
    ReceiptDocument,
)
from lawdesk.models.practice import Client, LedgerEntry
from lawdesk.validation import (
    DocumentValidator,
    EmptyItemListError,
    MissingCustomerError,
)
from lawdesk.validation.validator import MSG_EMPTY_ITEMS, MSG_MISSING_CUSTOMER


ITEMS = [
    DraftItem(name="A", price="10", quantity=2),
    DraftItem(name="B", price="5", quantity=1),
]


class TestDocumentValidator:

    def setup_method(self):
        self.validator = DocumentValidator()

    def test_valid_request(self):
        result = self.validator.validate(DocumentType.RECEIPT, "SITI", ITEMS)
        assert result.is_valid
        assert result.issues == []

    def test_missing_customer_reported_first(self):
        """With no customer and no items the customer error comes first."""
        result = self.validator.validate(DocumentType.INVOICE, "  ", [])

        assert result.error_count == 2
        assert result.first_error.message == MSG_MISSING_CUSTOMER

    def test_empty_items(self):
        result = self.validator.validate(DocumentType.QUOTATION, "SITI", [])
        assert result.first_error.message == MSG_EMPTY_ITEMS

    def test_statement_needs_no_items(self):
        assert self.validator.validate(DocumentType.STATEMENT, "SITI").is_valid

    def test_negative_total_is_only_a_warning(self):
        items = [DraftItem(name="Refund", price="-40")]
        result = self.validator.validate(DocumentType.RECEIPT, "SITI", items)

        assert result.is_valid
        assert [issue.issue_type for issue in result.issues] == ["negative_total"]

    def test_summary_lists_errors(self):
        result = self.validator.validate(DocumentType.RECEIPT, "", ITEMS)
        summary = self.validator.get_user_friendly_summary(result)

        assert MSG_MISSING_CUSTOMER in summary

    def test_raise_for_errors_picks_matching_exception(self):
        result = self.validator.validate(DocumentType.RECEIPT, "SITI", [])
        with pytest.raises(EmptyItemListError) as exc_info:
            self.validator.raise_for_errors(result)
        assert exc_info.value.issues


class TestBuildDocument:

    def test_quantity_rule(self):
        """A x2 at 10 and B x1 at 5 total 25.00."""
        document = build_document(
            DocumentType.RECEIPT,
            Parties(customer="SITI"),
            ITEMS,
            None,
            "RES-20240001",
            "2024-05-01",
        )

        assert isinstance(document, ReceiptDocument)
        assert document.total == Decimal("25.00")
        assert document.lines[0].label == "A (x2)"
        assert document.lines[0].amount == Decimal("20.00")
        assert document.lines[1].label == "B"
        assert document.title == "RESIT RASMI"

    def test_negative_lines_allowed(self):
        items = [DraftItem(name="Yuran", price="100"), DraftItem(name="Diskaun", price="-30")]
        document = build_document(
            DocumentType.INVOICE, Parties(customer="SITI"), items, "", "INV-1", "2024-05-01"
        )

        assert isinstance(document, InvoiceDocument)
        assert document.total == Decimal("70.00")
        assert document.lines[1].is_credit
        assert document.notes is None

    def test_missing_customer(self):
        with pytest.raises(MissingCustomerError):
            build_document(
                DocumentType.RECEIPT, Parties(customer=""), ITEMS, None, "RES-1", "2024-05-01"
            )

    def test_empty_items(self):
        with pytest.raises(EmptyItemListError):
            build_document(
                DocumentType.QUOTATION, Parties(customer="SITI"), [], None, "QTN-1", "2024-05-01"
            )

    def test_statement_kind_rejected(self):
        with pytest.raises(ValueError):
            build_document(
                DocumentType.STATEMENT, Parties(customer="SITI"), ITEMS, None, "STMT-1", "2024-05-01"
            )


class TestResolveParties:

    def test_fills_blank_contact_from_client(self):
        client = Client.register(name="Siti", phone="012-3456789", address="Baling")
        resolved = resolve_parties(Parties(customer="siti"), [client])

        assert resolved.phone == "012-3456789"
        assert resolved.address == "BALING"

    def test_keeps_entered_contact(self):
        client = Client.register(name="Siti", phone="012-3456789")
        resolved = resolve_parties(Parties(customer="SITI", phone="999"), [client])
        assert resolved.phone == "999"

    def test_cash_customer_untouched(self):
        client = Client.register(name=CASH_CUSTOMER, phone="1")
        parties = Parties(customer=CASH_CUSTOMER)
        assert resolve_parties(parties, [client]) is parties


class TestBuildStatement:

    def make_client(self) -> Client:
        client = Client.register(name="Siti", initial_fee="1000", on="2024-01-10")
        client = add_entry(client, LedgerEntry(date="2024-02-01", desc="Bayaran", amt="-300"))
        return add_entry(client, LedgerEntry(date="2024-03-01", desc="Caj", amt="50"))

    def test_full_ledger(self):
        document = build_statement(self.make_client(), "STMT-1", "2024-04-01")

        assert document.total == Decimal("750.00")
        assert document.lines[1].label == "2024-02-01 - BAYARAN"
        assert document.customer == "SITI"

    def test_filtered_total_matches_subset(self):
        document = build_statement(
            self.make_client(), "STMT-1", "2024-04-01", start="2024-02-01", end="2024-2-28"
        )

        assert len(document.lines) == 1
        assert document.total == Decimal("-300.00")
        assert document.period_end == "2024-02-28"

    def test_empty_period(self):
        document = build_statement(self.make_client(), "STMT-1", "2024-04-01", start="2030-01-01")

        assert document.lines == ()
        assert document.total == Decimal("0.00")


class TestRender:

    def make_document(self, customer="SITI"):
        return build_document(
            DocumentType.INVOICE,
            Parties(customer=customer, phone="012"),
            [DraftItem(name="Yuran", price="1234.5"), DraftItem(name="Diskaun", price="-40")],
            "Bayar segera",
            "INV-20240001",
            "2024-05-01",
        )

    def test_deterministic(self, firm):
        document = self.make_document()
        assert render_document_html(document, firm) == render_document_html(document, firm)

    def test_standard_layout(self, firm):
        html = render_document_html(self.make_document(), firm, currency="RM")

        assert "INV-20240001" in html
        assert "1,234.50" in html
        assert 'class="amount credit"' in html
        assert "RM 1,194.50" in html
        assert firm.name in html
        assert "Bayar segera" in html

    def test_user_text_escaped(self, firm):
        html = render_document_html(self.make_document(customer="<b>x</b>"), firm)
        assert "&lt;b&gt;x&lt;/b&gt;" in html
        assert "<b>x</b>" not in html

    def test_thermal_layout(self, firm):
        html = render_document_html(self.make_document(), firm, print_mode=PrintMode.THERMAL)

        assert "80mm" in html
        assert "watermark" not in html
        assert "YURAN" in html

    def test_logo_included(self, firm):
        logo = "data:image/png;base64,AAAA"
        assert logo in render_document_html(self.make_document(), firm, logo=logo)

    def test_format_amount(self):
        assert format_amount(Decimal("-40")) == "-40.00"
        assert format_amount(Decimal("1234567.891")) == "1,234,567.89"

    def test_print_script_delay(self):
        assert "600" in print_script(600)
