"""Error and warning types for order pricing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PricingErrorCode(str, Enum):
    """Structural failures that block pricing."""

    ZONE_NOT_FOUND = "zone_not_found"
    INVALID_ZONE_CONFIGURATION = "invalid_zone_configuration"
    UNKNOWN_ORDER_ITEM = "unknown_order_item"
    DUPLICATE_ORDER_ITEM = "duplicate_order_item"
    RECONCILIATION_TRANSACTION_FAILED = "reconciliation_transaction_failed"


class PricingWarning(str, Enum):
    """Non-fatal degradations the operator should be told about."""

    UNKNOWN_COUNTRY = "unknown_country"
    INVALID_VAT_NUMBER_FORMAT = "invalid_vat_number_format"
    VAT_VERIFICATION_UNAVAILABLE = "vat_verification_unavailable"


class LineItemErrorCode(str, Enum):
    """Reasons a line item is rejected at input validation time."""

    NEGATIVE_OR_INVALID_QUANTITY = "negative_or_invalid_quantity"
    NEGATIVE_OR_INVALID_PRICE = "negative_or_invalid_price"
    NEGATIVE_OR_INVALID_WEIGHT = "negative_or_invalid_weight"


@dataclass(frozen=True, slots=True)
class PricingError:
    """
    Error returned by the pricing core.

    Attributes:
        code: Error code identifying the failure.
        message: Operator-actionable message.
        details: Additional context (optional).
    """

    code: PricingErrorCode
    message: str
    details: str | None = None

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"


class InvalidLineItemError(ValueError):
    """A line item failed input validation."""

    def __init__(self, code: LineItemErrorCode, message: str) -> None:
        """Initialize with the rejection code and message."""
        self.code = code
        self.message = message
        super().__init__(message)


class ReconciliationTransactionFailed(Exception):
    """An order-item reconciliation could not be persisted; nothing was applied."""

    def __init__(self, order_id: object, message: str = "Order item update failed") -> None:
        """Initialize with the order id and message."""
        self.order_id = order_id
        self.message = message
        super().__init__(f"{message} (order {order_id})")

    def as_error(self) -> PricingError:
        """Convert to a PricingError value."""
        return PricingError(
            code=PricingErrorCode.RECONCILIATION_TRANSACTION_FAILED,
            message=self.message,
            details=str(self.__cause__) if self.__cause__ else None,
        )


def ZoneNotFoundError(destination_country: str) -> PricingError:
    """Create a zone-not-found error."""
    return PricingError(
        code=PricingErrorCode.ZONE_NOT_FOUND,
        message="No shipping zone matches the destination; configure a fallback shipping zone",
        details=f"destination={destination_country or '<empty>'}",
    )


def InvalidZoneConfigurationError(details: str) -> PricingError:
    """Create an invalid-zone-configuration error."""
    return PricingError(
        code=PricingErrorCode.INVALID_ZONE_CONFIGURATION,
        message="Shipping zone configuration is invalid",
        details=details,
    )


def UnknownOrderItemError(item_id: str) -> PricingError:
    """Create an unknown-order-item error."""
    return PricingError(
        code=PricingErrorCode.UNKNOWN_ORDER_ITEM,
        message="Edited item does not belong to this order",
        details=f"item_id={item_id}",
    )


def DuplicateOrderItemError(item_id: str) -> PricingError:
    """Create a duplicate-order-item error."""
    return PricingError(
        code=PricingErrorCode.DUPLICATE_ORDER_ITEM,
        message="Edited item appears more than once in the edit",
        details=f"item_id={item_id}",
    )
