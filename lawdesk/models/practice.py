"""
Core Data Models for Lawdesk

These models define the strict schemas for all practice data:
clients and their ledgers, notarization (PJS) records, the service
price list, and the persisted application state.

CONVENTIONS:
- Python attributes are snake_case; the persisted layout is camelCase
  (`pjsRecords`, `invCounter`, ...) through an alias generator.
- Money is a Decimal quantized to 2 places and written to JSON as a number.
- Dates are zero-padded ISO strings (`YYYY-MM-DD`). Looser input such as
  `2024-1-5` or a `datetime.date` is normalized at the boundary, so plain
  string comparison orders dates correctly everywhere downstream.
"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


CENT = Decimal("0.01")

FEE_APPROVED_DESC = "FEE PROFESSIONAL DIPERSETUJUI"
IMPORTED_BALANCE_DESC = "IMPORTED BALANCE"
UNNAMED = "UNNAMED"

_LOOSE_ISO_DATE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})\s*$")


# =============================================================================
# FIELD TYPES
# =============================================================================

def quantize_money(value: Decimal) -> Decimal:
    """Round to currency minor units (2 decimals, half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_date(value: Any) -> str:
    """
    Normalize a calendar date to zero-padded `YYYY-MM-DD`.

    Accepts `date`/`datetime` objects and `Y-M-D` strings with or without
    zero padding. Raises ValueError for anything that is not a real date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        match = _LOOSE_ISO_DATE.match(value)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return date(year, month, day).isoformat()
    raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def today_iso() -> str:
    return date.today().isoformat()


def money_to_json(value: Decimal) -> float:
    return float(value)


def to_upper(value: str) -> str:
    return value.upper()


Money = Annotated[
    Decimal,
    AfterValidator(quantize_money),
    PlainSerializer(money_to_json, return_type=float, when_used="json"),
]
UnsignedMoney = Annotated[Money, Field(ge=0)]
IsoDate = Annotated[str, BeforeValidator(normalize_date)]
UpperText = Annotated[str, AfterValidator(to_upper)]


class PracticeModel(BaseModel):
    """Base for persisted entities: camelCase aliases, stripped strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class PageId(str, Enum):
    """Top-level pages of the application."""
    GUAMAN = "guaman"          # Client case files and ledgers
    PJS = "pjs"                # Notarization records
    INVENTORY = "inventory"    # Service price list
    INVOICE = "invoice"        # Receipt / invoice / quotation generation


class ThemeMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"


# =============================================================================
# LEDGER AND CLIENTS
# =============================================================================

class LedgerEntry(PracticeModel):
    """
    One dated transaction on a client's account.

    Positive `amt` increases what the client owes (fee, charge);
    negative `amt` is a payment or credit. Entries are never edited,
    only appended or removed.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Stable entry identifier"
    )
    date: IsoDate = Field(
        ...,
        description="Transaction date (YYYY-MM-DD)"
    )
    desc: UpperText = Field(
        ...,
        min_length=1,
        max_length=300,
        description="Transaction description, stored in uppercase"
    )
    amt: Money = Field(
        ...,
        description="Signed amount; negative for payments"
    )


class Client(PracticeModel):
    """
    A client case file ("Guaman") with its running account ledger.

    CRITICAL: `ledger` order is append order, not date order.
    Positional operations are only valid against the snapshot just shown.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique client ID"
    )
    name: UpperText = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Client name (required)"
    )
    detail: UpperText = Field(
        default="",
        max_length=500,
        description="Free-text case detail"
    )
    phone: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Contact number"
    )
    address: Optional[UpperText] = Field(
        default=None,
        max_length=500,
        description="Postal address"
    )
    ledger: list[LedgerEntry] = Field(default_factory=list)

    @field_validator('phone', 'address')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @classmethod
    def register(
        cls,
        name: str,
        detail: str = "",
        initial_fee: Union[Decimal, float, str] = Decimal("0"),
        phone: Optional[str] = None,
        address: Optional[str] = None,
        on: Optional[str] = None,
    ) -> "Client":
        """
        Create a new client seeded with the approved professional fee.

        Every registered client starts with exactly one ledger entry,
        even when the fee is zero.
        """
        return cls(
            name=name,
            detail=detail,
            phone=phone,
            address=address,
            ledger=[
                LedgerEntry(
                    date=on or today_iso(),
                    desc=FEE_APPROVED_DESC,
                    amt=initial_fee,
                )
            ],
        )


# =============================================================================
# NOTARIZATION RECORDS AND SERVICES
# =============================================================================

class PjsRecord(PracticeModel):
    """A notarization (Pesuruhjaya Sumpah) transaction. Unrelated to Client."""

    id: UUID = Field(default_factory=uuid4)
    date: IsoDate = Field(
        default_factory=today_iso,
        description="Transaction date (YYYY-MM-DD)"
    )
    name: UpperText = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Customer name"
    )
    detail: UpperText = Field(
        default="",
        max_length=500,
        description="Service detail"
    )
    amount: UnsignedMoney = Field(
        ...,
        description="Amount charged"
    )


class ServiceItem(PracticeModel):
    """An entry on the firm's service price list."""

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Service name"
    )
    price: UnsignedMoney = Field(
        ...,
        description="Unit price"
    )


# =============================================================================
# APPLICATION STATE
# =============================================================================

class AppState(PracticeModel):
    """
    Root aggregate, persisted as one unit.

    CRITICAL: `inv_counter` only ever increases. It is shared by receipts,
    invoices and quotations; statements are numbered independently.
    """

    clients: list[Client] = Field(default_factory=list)
    pjs_records: list[PjsRecord] = Field(default_factory=list)
    inventory: list[ServiceItem] = Field(default_factory=list)
    inv_counter: int = Field(
        default=1,
        ge=1,
        description="Next number for counter-based documents"
    )
    firm_logo: Optional[str] = Field(
        default=None,
        description="Firm logo as a data URL"
    )
    current_page: PageId = PageId.GUAMAN
    active_client_idx: Optional[int] = Field(
        default=None,
        ge=0,
        description="Index of the client whose ledger is open"
    )
    theme: ThemeMode = ThemeMode.DARK

    @model_validator(mode='after')
    def drop_stale_selection(self) -> 'AppState':
        """An open-ledger index that no longer points at a client is cleared."""
        if (
            self.active_client_idx is not None
            and self.active_client_idx >= len(self.clients)
        ):
            self.active_client_idx = None
        return self

    @property
    def active_client(self) -> Optional[Client]:
        if self.active_client_idx is None:
            return None
        return self.clients[self.active_client_idx]

    def find_client(self, client_id: UUID) -> Optional[Client]:
        for client in self.clients:
            if client.id == client_id:
                return client
        return None

    def find_client_by_name(self, name: str) -> Optional[Client]:
        wanted = name.strip().upper()
        for client in self.clients:
            if client.name == wanted:
                return client
        return None

    def to_json(self) -> str:
        """Serialize to the persisted camelCase layout."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "AppState":
        return cls.model_validate_json(text)
