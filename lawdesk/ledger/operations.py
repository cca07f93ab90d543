"""
Ledger Operations

Pure functions over a client's ledger. Nothing here mutates its input:
every change returns a new Client with a new ledger list.

CRITICAL: Balance is always derived by summing entries, never stored.
Positive amounts are owed by the client, negative amounts are payments.
"""

from decimal import Decimal
from typing import Iterable, Optional, Union
from uuid import UUID

from lawdesk.models.practice import Client, LedgerEntry, normalize_date


ZERO = Decimal("0.00")

# Bounds used when a date-range filter side is open
OPEN_START = "0000-00-00"
OPEN_END = "9999-99-99"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class LedgerIndexError(LedgerError, IndexError):
    """Positional delete outside the ledger snapshot."""
    pass


class LedgerEntryNotFoundError(LedgerError, LookupError):
    """No entry with the requested id."""
    pass


# =============================================================================
# BALANCES
# =============================================================================

def sum_entries(entries: Iterable[LedgerEntry]) -> Decimal:
    """Sum of entry amounts; 0.00 for no entries."""
    return sum((entry.amt for entry in entries), ZERO)


def balance(source: Union[Client, Iterable[LedgerEntry]]) -> Decimal:
    """
    Outstanding balance of a client, or of any list of entries.

    Accepts a Client or an iterable of entries so filtered subsets use
    the same rule as the full ledger.
    """
    if isinstance(source, Client):
        return sum_entries(source.ledger)
    return sum_entries(source)


def running_balances(entries: Iterable[LedgerEntry]) -> list[tuple[LedgerEntry, Decimal]]:
    """Pair each entry with the balance after it, in storage order."""
    rows = []
    total = ZERO
    for entry in entries:
        total += entry.amt
        rows.append((entry, total))
    return rows


# =============================================================================
# MUTATIONS (copy-on-write)
# =============================================================================

def add_entry(client: Client, entry: LedgerEntry) -> Client:
    """Append an entry at the end of the ledger. No date sorting."""
    return client.model_copy(update={"ledger": [*client.ledger, entry]})


def delete_entry(client: Client, index: int) -> Client:
    """
    Remove the entry at `index` of this exact ledger snapshot.

    Raises:
        LedgerIndexError: index is negative or past the end
    """
    if index < 0 or index >= len(client.ledger):
        raise LedgerIndexError(
            f"Ledger index {index} out of range for {len(client.ledger)} entries"
        )
    ledger = client.ledger[:index] + client.ledger[index + 1:]
    return client.model_copy(update={"ledger": ledger})


def delete_entry_by_id(client: Client, entry_id: UUID) -> Client:
    """
    Remove the entry with the given id.

    Raises:
        LedgerEntryNotFoundError: no entry carries that id
    """
    for index, entry in enumerate(client.ledger):
        if entry.id == entry_id:
            return delete_entry(client, index)
    raise LedgerEntryNotFoundError(f"No ledger entry {entry_id} for {client.name}")


def find_entry(client: Client, entry_id: UUID) -> Optional[LedgerEntry]:
    for entry in client.ledger:
        if entry.id == entry_id:
            return entry
    return None


# =============================================================================
# FILTERING
# =============================================================================

def filter_by_date_range(
    entries: Iterable[LedgerEntry],
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> list[LedgerEntry]:
    """
    Entries dated within [start, end], both inclusive.

    Entry dates are zero-padded ISO strings, so plain string comparison
    is calendar order. Bounds are normalized the same way; an open side
    falls back to OPEN_START / OPEN_END. An empty result is valid.
    """
    low = normalize_date(start) if start else OPEN_START
    high = normalize_date(end) if end else OPEN_END
    return [entry for entry in entries if low <= entry.date <= high]
