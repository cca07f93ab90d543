"""Client ledger operations."""

from lawdesk.ledger.operations import (
    OPEN_END,
    OPEN_START,
    LedgerEntryNotFoundError,
    LedgerError,
    LedgerIndexError,
    add_entry,
    balance,
    delete_entry,
    delete_entry_by_id,
    filter_by_date_range,
    find_entry,
    running_balances,
    sum_entries,
)

__all__ = [
    "OPEN_END",
    "OPEN_START",
    "LedgerEntryNotFoundError",
    "LedgerError",
    "LedgerIndexError",
    "add_entry",
    "balance",
    "delete_entry",
    "delete_entry_by_id",
    "filter_by_date_range",
    "find_entry",
    "running_balances",
    "sum_entries",
]
