"""Document request validation."""

from lawdesk.validation.validator import (
    MSG_EMPTY_ITEMS,
    MSG_MISSING_CUSTOMER,
    DocumentValidationError,
    DocumentValidator,
    EmptyItemListError,
    MissingCustomerError,
)

__all__ = [
    "MSG_EMPTY_ITEMS",
    "MSG_MISSING_CUSTOMER",
    "DocumentValidationError",
    "DocumentValidator",
    "EmptyItemListError",
    "MissingCustomerError",
]
