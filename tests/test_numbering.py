"""Tests for document reference numbering."""

from datetime import date, datetime

import pytest

from lawdesk.documents.numbering import next_reference, parse_reference
from lawdesk.models.document import DocumentType


class TestNextReference:

    def test_counter_based_format(self):
        today = date(2024, 5, 1)
        assert next_reference(DocumentType.RECEIPT, 7, today=today) == "RES-20240007"
        assert next_reference(DocumentType.INVOICE, 12, today=today) == "INV-20240012"
        assert next_reference(DocumentType.QUOTATION, 1234, today=today) == "QTN-20241234"

    def test_counter_wider_than_four_digits(self):
        assert next_reference(DocumentType.RECEIPT, 12345, today=date(2024, 1, 1)) == "RES-202412345"

    def test_statement_uses_clock(self):
        now = datetime(2024, 5, 1, 12, 0, 0)
        reference = next_reference(DocumentType.STATEMENT, 99, now=now)
        assert reference == f"STMT-{int(now.timestamp() * 1000)}"

    def test_counter_below_one_rejected(self):
        with pytest.raises(ValueError):
            next_reference(DocumentType.INVOICE, 0)

    def test_parse_reference(self):
        assert parse_reference("INV-20240003") == ("INV", "20240003")
        with pytest.raises(ValueError):
            parse_reference("garbage")
