"""
Record Collections

Clients, PJS records and services are plain ordered lists inside
AppState. These helpers return new lists and never mutate their input.

There is no update-in-place: a record is added, removed by id, or the
whole collection is replaced by an import.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence, TypeVar
from uuid import UUID

from lawdesk.models.practice import PjsRecord


T = TypeVar("T")

PJS_SORT_KEYS = ("date", "name", "detail", "amount")


class RecordNotFoundError(LookupError):
    """No record with the requested id."""
    pass


def append_item(items: Sequence[T], item: T) -> list[T]:
    """New list with `item` at the end."""
    return [*items, item]


def remove_by_id(items: Sequence[T], item_id: UUID) -> list[T]:
    """
    New list without the record whose `id` matches. No cascade.

    Raises:
        RecordNotFoundError: no record carries that id
    """
    remaining = [item for item in items if item.id != item_id]
    if len(remaining) == len(items):
        raise RecordNotFoundError(f"No record with id {item_id}")
    return remaining


def find_by_id(items: Iterable[T], item_id: UUID) -> Optional[T]:
    for item in items:
        if item.id == item_id:
            return item
    return None


def replace_all(items: Sequence[T], new_items: Iterable[T]) -> list[T]:
    """
    Destructive bulk replace: the result holds only `new_items`.

    Callers confirm with the user before calling this.
    """
    return list(new_items)


def sort_records(
    records: Iterable[PjsRecord],
    key: str = "date",
    descending: bool = True,
) -> list[PjsRecord]:
    """
    PJS records ordered by one field. Text fields sort case-insensitively.

    The sort is stable, so records with equal keys keep list order.
    """
    if key not in PJS_SORT_KEYS:
        raise ValueError(f"Cannot sort PJS records by {key!r}")

    def sort_key(record: PjsRecord):
        value = getattr(record, key)
        return value.lower() if isinstance(value, str) else value

    return sorted(records, key=sort_key, reverse=descending)


def display_year(records: Iterable[PjsRecord], today: Optional[date] = None) -> int:
    """Year of the latest PJS record, or the current year when there are none."""
    latest = max((record.date for record in records), default=None)
    if latest is None:
        return (today or date.today()).year
    return int(latest[:4])


def total_amount(records: Iterable[PjsRecord]) -> Decimal:
    """Sum of PJS amounts for the summary line."""
    return sum((record.amount for record in records), Decimal("0.00"))
