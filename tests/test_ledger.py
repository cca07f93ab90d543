"""
Tests for ledger operations.

The balance is never stored, so most tests check that it always equals
the sum of whatever entries are in view.
"""

from decimal import Decimal

import pytest

from lawdesk.ledger import (
    LedgerEntryNotFoundError,
    LedgerIndexError,
    add_entry,
    balance,
    delete_entry,
    delete_entry_by_id,
    filter_by_date_range,
    find_entry,
    running_balances,
)
from lawdesk.models.practice import Client, LedgerEntry


def make_client() -> Client:
    client = Client.register(name="Siti", initial_fee="1000", on="2024-01-10")
    for on, desc, amt in [
        ("2024-02-01", "Bayaran", "-300"),
        ("2024-02-15", "Caj mahkamah", "120.50"),
        ("2024-03-05", "Bayaran", "-200"),
    ]:
        client = add_entry(client, LedgerEntry(date=on, desc=desc, amt=amt))
    return client


class TestBalance:

    def test_balance_is_sum_of_entries(self):
        client = make_client()
        assert balance(client) == Decimal("620.50")
        assert balance(client) == sum(entry.amt for entry in client.ledger)

    def test_empty_entries_balance_zero(self):
        assert balance([]) == Decimal("0.00")

    def test_running_balances(self):
        rows = running_balances(make_client().ledger)
        assert [total for _, total in rows] == [
            Decimal("1000.00"),
            Decimal("700.00"),
            Decimal("820.50"),
            Decimal("620.50"),
        ]


class TestMutations:

    def test_add_entry_appends_without_sorting(self):
        client = make_client()
        backdated = LedgerEntry(date="2023-12-01", desc="lama", amt="5")

        updated = add_entry(client, backdated)

        assert updated.ledger[-1] is backdated
        assert len(client.ledger) == 4  # input untouched

    def test_delete_each_position(self):
        """Deleting index i removes exactly that entry and keeps the rest in order."""
        client = make_client()
        for i in range(len(client.ledger)):
            updated = delete_entry(client, i)
            assert updated.ledger == client.ledger[:i] + client.ledger[i + 1:]
            assert balance(updated) == balance(client) - client.ledger[i].amt

    def test_delete_out_of_range(self):
        client = make_client()
        with pytest.raises(LedgerIndexError):
            delete_entry(client, 4)
        with pytest.raises(IndexError):
            delete_entry(client, -1)

    def test_delete_by_id(self):
        client = make_client()
        target = client.ledger[2]

        updated = delete_entry_by_id(client, target.id)

        assert find_entry(updated, target.id) is None
        assert len(updated.ledger) == 3

    def test_delete_unknown_id(self):
        client = make_client()
        other = LedgerEntry(date="2024-01-01", desc="x", amt=1)
        with pytest.raises(LedgerEntryNotFoundError):
            delete_entry_by_id(client, other.id)


class TestDateFilter:

    def test_bounds_are_inclusive(self):
        entries = filter_by_date_range(make_client().ledger, "2024-02-01", "2024-02-15")
        assert [entry.date for entry in entries] == ["2024-02-01", "2024-02-15"]

    def test_open_sides(self):
        ledger = make_client().ledger
        assert len(filter_by_date_range(ledger, start="2024-02-10")) == 2
        assert len(filter_by_date_range(ledger, end="2024-02-10")) == 2
        assert len(filter_by_date_range(ledger)) == 4

    def test_unpadded_bounds(self):
        entries = filter_by_date_range(make_client().ledger, "2024-3-1", "2024-3-31")
        assert len(entries) == 1

    def test_empty_range_balance_zero(self):
        entries = filter_by_date_range(make_client().ledger, "2025-01-01", "2025-12-31")
        assert entries == []
        assert balance(entries) == Decimal("0.00")

    def test_filtered_balance_is_sum(self):
        entries = filter_by_date_range(make_client().ledger, "2024-02-01")
        assert balance(entries) == Decimal("-379.50")
