"""
CSV Import / Export

One CSV layout per collection:
- clients:  Name, Detail, Phone, Address, Balance
- PJS:      Date, Name, Detail, Amount
- services: Name, Price

Import is lenient about content and strict about shape:
- headers are matched case-insensitively
- a missing name becomes UNNAMED, a missing or bad number becomes 0
- a missing or unreadable PJS date becomes today
- a negative PJS amount or service price becomes 0
- over-long text is cut to the field limit
- each imported client gets a single IMPORTED BALANCE ledger entry

Every data row is imported. Only a file that cannot be read as CSV,
or has no header row, raises TransferFormatError. Nothing is replaced until parsing succeeds.
"""

import csv
import io
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Optional, TypeVar, Union

from pydantic import ValidationError

from lawdesk.ledger import balance
from lawdesk.models.practice import (
    CENT,
    IMPORTED_BALANCE_DESC,
    UNNAMED,
    Client,
    LedgerEntry,
    PjsRecord,
    ServiceItem,
    normalize_date,
)
from lawdesk.transfer.errors import TransferFormatError


T = TypeVar("T")

CLIENT_HEADERS = ["Name", "Detail", "Phone", "Address", "Balance"]
PJS_HEADERS = ["Date", "Name", "Detail", "Amount"]
SERVICE_HEADERS = ["Name", "Price"]

# Field limits, matching the models
NAME_MAX = 200
TEXT_MAX = 500
PHONE_MAX = 50

EXPORT_PREFIXES = {
    "clients": "HMA_Guaman",
    "pjs": "HMA_PJS",
    "services": "HMA_Servis",
}


# =============================================================================
# HELPERS
# =============================================================================

def export_filename(collection: str, today: Optional[date] = None) -> str:
    """Download name such as `HMA_PJS_2024-03-01.csv`."""
    stamp = (today or date.today()).isoformat()
    return f"{EXPORT_PREFIXES[collection]}_{stamp}.csv"


def _money_text(value: Decimal) -> str:
    return f"{value:.2f}"


def _write(headers: list[str], rows: Iterable[list]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def _parse_number(raw: Optional[str]) -> Decimal:
    """Lenient number parse: blanks and garbage become 0."""
    text = (raw or "").strip().replace(",", "")
    if not text:
        return Decimal("0")
    try:
        value = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    try:
        value.quantize(CENT)
    except InvalidOperation:
        # too large to hold in minor units
        return Decimal("0")
    return value


def _parse_unsigned(raw: Optional[str]) -> Decimal:
    """Lenient parse for fields that cannot be negative."""
    value = _parse_number(raw)
    return value if value >= 0 else Decimal("0")


def _parse_date(raw: Optional[str], default: str) -> str:
    text = (raw or "").strip()
    if not text:
        return default
    try:
        return normalize_date(text)
    except ValueError:
        return default


def _read_rows(content: Union[str, bytes]) -> list[dict[str, str]]:
    """Rows as dicts keyed by lower-cased, stripped header names."""
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise TransferFormatError(f"CSV file is not UTF-8 text: {e}")
    elif content.startswith("\ufeff"):
        content = content[1:]

    try:
        reader = csv.reader(io.StringIO(content))
        header = next(reader, None)
        if not header or not any(cell.strip() for cell in header):
            raise TransferFormatError("CSV file has no header row")
        keys = [cell.strip().lower() for cell in header]

        rows = []
        for cells in reader:
            if not any(cell.strip() for cell in cells):
                continue
            rows.append({
                key: (cells[i] if i < len(cells) else "")
                for i, key in enumerate(keys)
            })
        return rows
    except csv.Error as e:
        raise TransferFormatError(f"Could not read CSV: {e}")


def _build_all(
    rows: list[dict[str, str]],
    build: Callable[[dict[str, str]], T],
) -> list[T]:
    items = []
    # Row 1 is the header
    for line_no, row in enumerate(rows, start=2):
        try:
            items.append(build(row))
        except (ValidationError, ValueError) as e:
            raise TransferFormatError(f"Row {line_no}: {e}")
    return items


def _text(row: dict[str, str], key: str, limit: int = TEXT_MAX) -> str:
    return (row.get(key) or "").strip()[:limit].strip()


# =============================================================================
# CLIENTS
# =============================================================================

def export_clients_csv(clients: Iterable[Client]) -> str:
    return _write(CLIENT_HEADERS, (
        [
            client.name,
            client.detail,
            client.phone or "",
            client.address or "",
            _money_text(balance(client)),
        ]
        for client in clients
    ))


def parse_clients_csv(
    content: Union[str, bytes],
    today: Optional[date] = None,
) -> list[Client]:
    """Clients from CSV, each carrying its balance as one imported entry."""
    imported_on = (today or date.today()).isoformat()

    def build(row: dict[str, str]) -> Client:
        return Client(
            name=_text(row, "name", NAME_MAX) or UNNAMED,
            detail=_text(row, "detail"),
            phone=_text(row, "phone", PHONE_MAX) or None,
            address=_text(row, "address") or None,
            ledger=[
                LedgerEntry(
                    date=imported_on,
                    desc=IMPORTED_BALANCE_DESC,
                    amt=_parse_number(row.get("balance")),
                )
            ],
        )

    return _build_all(_read_rows(content), build)


# =============================================================================
# PJS RECORDS
# =============================================================================

def export_pjs_csv(records: Iterable[PjsRecord]) -> str:
    return _write(PJS_HEADERS, (
        [record.date, record.name, record.detail, _money_text(record.amount)]
        for record in records
    ))


def parse_pjs_csv(
    content: Union[str, bytes],
    today: Optional[date] = None,
) -> list[PjsRecord]:
    default_date = (today or date.today()).isoformat()

    def build(row: dict[str, str]) -> PjsRecord:
        return PjsRecord(
            date=_parse_date(row.get("date"), default_date),
            name=_text(row, "name", NAME_MAX) or UNNAMED,
            detail=_text(row, "detail"),
            amount=_parse_unsigned(row.get("amount")),
        )

    return _build_all(_read_rows(content), build)


# =============================================================================
# SERVICES
# =============================================================================

def export_services_csv(services: Iterable[ServiceItem]) -> str:
    return _write(SERVICE_HEADERS, (
        [service.name, _money_text(service.price)]
        for service in services
    ))


def parse_services_csv(content: Union[str, bytes]) -> list[ServiceItem]:
    def build(row: dict[str, str]) -> ServiceItem:
        return ServiceItem(
            name=_text(row, "name", NAME_MAX) or UNNAMED,
            price=_parse_unsigned(row.get("price")),
        )

    return _build_all(_read_rows(content), build)
