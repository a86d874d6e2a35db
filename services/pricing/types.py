"""Value types for order pricing and shipping-rate resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING

from core.result import Result, failure, success
from services.pricing.errors import InvalidLineItemError, LineItemErrorCode, PricingWarning

if TYPE_CHECKING:
    from collections.abc import Iterable

ZERO = Decimal("0")
CENT = Decimal("0.01")
WILDCARD = "*"


def round2(value: Decimal) -> Decimal:
    """Round a monetary amount to 2 decimals, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    """Return the rounded total of one order line."""
    return round2(unit_price * quantity)


class RateType(str, Enum):
    """Shipping rate formulas."""

    FLAT = "flat"
    PER_WEIGHT = "per_weight"
    PER_ITEM = "per_item"
    COMBINED = "combined"


class CustomerType(str, Enum):
    """Customer categories used for VAT classification."""

    PARTICULIER = "particulier"
    PROFESSIONNEL = "professionnel"


class VatZone(str, Enum):
    """VAT treatment of a sale."""

    DOMESTIC = "domestic"
    INTRA_COMMUNITY = "intra_community"
    EU_STANDARD = "eu_standard"
    EXPORT = "export"


@dataclass(frozen=True, slots=True)
class Address:
    """
    Tax-relevant part of an address.

    Attributes:
        country: Country code or name as entered.
        vat_number: Intra-community VAT number, if any.
    """

    country: str
    vat_number: str | None = None


@dataclass(frozen=True, slots=True)
class ShippingRate:
    """
    Rate formula of a shipping zone.

    Attributes:
        rate_type: Which formula applies.
        base_price: Fixed part of the cost (first item included).
        per_kg_price: Price per kg (per_weight and combined only).
        per_item_price: Price per additional item (per_item and combined only).
        free_above: Net subtotal from which shipping is free.
    """

    rate_type: RateType
    base_price: Decimal
    per_kg_price: Decimal | None = None
    per_item_price: Decimal | None = None
    free_above: Decimal | None = None

    def __post_init__(self) -> None:
        """Validate that every configured amount is non-negative."""
        for name in ("base_price", "per_kg_price", "per_item_price", "free_above"):
            value = getattr(self, name)
            if value is not None and value < 0:
                msg = f"{name} cannot be negative"
                raise ValueError(msg)

    @property
    def uses_weight(self) -> bool:
        """Check if the formula charges by weight."""
        return self.rate_type in {RateType.PER_WEIGHT, RateType.COMBINED}

    @property
    def uses_items(self) -> bool:
        """Check if the formula charges by item."""
        return self.rate_type in {RateType.PER_ITEM, RateType.COMBINED}


@dataclass(frozen=True, slots=True)
class ShippingZone:
    """
    Operator-configured group of destination countries sharing one rate.

    Attributes:
        id: Zone identifier.
        name: Display name.
        countries: ISO-2 codes, or the wildcard token "*".
        rate: Rate formula for the zone.
    """

    id: str
    name: str
    countries: tuple[str, ...]
    rate: ShippingRate

    def __post_init__(self) -> None:
        """Store country codes upper-cased and stripped."""
        object.__setattr__(
            self,
            "countries",
            tuple(c.strip().upper() for c in self.countries if c.strip()),
        )

    @property
    def is_fallback(self) -> bool:
        """Check if this is the "rest of world" zone."""
        return WILDCARD in self.countries

    def covers(self, country_code: str) -> bool:
        """Check if an ISO-2 code is explicitly listed in this zone."""
        return bool(country_code) and country_code in self.countries


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    One cart or order line.

    A missing ``product_id`` marks a manual, unlinked item.
    """

    title: str
    unit_price: Decimal
    quantity: int
    product_id: str | None = None
    weight_kg: Decimal | None = None

    def __post_init__(self) -> None:
        """Reject invalid quantities, prices and weights."""
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidLineItemError(
                LineItemErrorCode.NEGATIVE_OR_INVALID_QUANTITY,
                f"quantity must be an integer, got {self.quantity!r}",
            )
        if self.quantity < 1:
            raise InvalidLineItemError(
                LineItemErrorCode.NEGATIVE_OR_INVALID_QUANTITY,
                f"quantity must be at least 1, got {self.quantity}",
            )
        if not isinstance(self.unit_price, Decimal) or not self.unit_price.is_finite():
            raise InvalidLineItemError(
                LineItemErrorCode.NEGATIVE_OR_INVALID_PRICE,
                f"unit_price must be a finite Decimal, got {self.unit_price!r}",
            )
        if self.unit_price < 0:
            raise InvalidLineItemError(
                LineItemErrorCode.NEGATIVE_OR_INVALID_PRICE,
                f"unit_price cannot be negative, got {self.unit_price}",
            )
        if self.weight_kg is not None and self.weight_kg < 0:
            raise InvalidLineItemError(
                LineItemErrorCode.NEGATIVE_OR_INVALID_WEIGHT,
                f"weight_kg cannot be negative, got {self.weight_kg}",
            )

    @property
    def gross_amount(self) -> Decimal:
        """Unrounded price of the line."""
        return self.unit_price * self.quantity

    @property
    def total_weight_kg(self) -> Decimal:
        """Weight of the whole line (0 when unknown)."""
        return (self.weight_kg or ZERO) * self.quantity


def validate_line_item(
    *,
    title: str,
    unit_price: Decimal,
    quantity: int,
    product_id: str | None = None,
    weight_kg: Decimal | None = None,
) -> Result[LineItem, InvalidLineItemError]:
    """
    Build a LineItem, returning the rejection instead of raising.

    Returns:
        Result containing the LineItem or the InvalidLineItemError.
    """
    try:
        return success(
            LineItem(
                title=title,
                unit_price=unit_price,
                quantity=quantity,
                product_id=product_id,
                weight_kg=weight_kg,
            )
        )
    except InvalidLineItemError as e:
        return failure(e)


@dataclass(frozen=True, slots=True)
class Customer:
    """
    Customer fields relevant to pricing.

    Attributes:
        country: Country code or name.
        customer_type: Individual or professional.
        vat_number: Intra-community VAT number, if any.
        discount_rate: Negotiated discount as a fraction in [0, 1].
        payment_terms_days: Payment terms, carried onto invoices.
        id: Customer identifier, when persisted.
        name: Display name.
    """

    country: str
    customer_type: CustomerType = CustomerType.PARTICULIER
    vat_number: str | None = None
    discount_rate: Decimal | None = None
    payment_terms_days: int | None = None
    id: str | None = None
    name: str = ""

    def __post_init__(self) -> None:
        """Validate the discount rate."""
        if self.discount_rate is not None and not ZERO <= self.discount_rate <= 1:
            msg = f"discount_rate must be between 0 and 1, got {self.discount_rate}"
            raise ValueError(msg)

    @property
    def address(self) -> Address:
        """Tax-relevant address of the customer."""
        return Address(country=self.country, vat_number=self.vat_number)


@dataclass(frozen=True, slots=True)
class VatTreatment:
    """
    Result of VAT classification.

    Attributes:
        rate_percent: VAT rate as a percentage.
        label: Invoice label, e.g. "TVA 20%".
        zone: Which rule produced the treatment.
        warnings: Degradations applied while classifying.
    """

    rate_percent: Decimal
    label: str
    zone: VatZone = VatZone.DOMESTIC
    warnings: tuple[PricingWarning, ...] = ()


@dataclass(frozen=True, slots=True)
class CartMetrics:
    """Cart figures the shipping formulas are evaluated against."""

    subtotal_net: Decimal
    total_weight_kg: Decimal
    item_count: int

    @classmethod
    def from_items(cls, items: Iterable[LineItem], subtotal_net: Decimal) -> CartMetrics:
        """Compute weight and item count from line items."""
        items = list(items)
        return cls(
            subtotal_net=subtotal_net,
            total_weight_kg=sum((i.total_weight_kg for i in items), ZERO),
            item_count=sum(i.quantity for i in items),
        )


@dataclass(frozen=True, slots=True)
class ShippingQuote:
    """
    Resolved shipping cost.

    Attributes:
        amount: Cost charged, rounded to 2 decimals.
        is_free: Whether the free-shipping threshold was reached.
        zone_name: Name of the matched zone.
        zone_id: Identifier of the matched zone.
        cost_before_free: Formula cost before the free-shipping override.
        free_above: Threshold of the matched zone, if any.
    """

    amount: Decimal
    is_free: bool
    zone_name: str
    zone_id: str = ""
    cost_before_free: Decimal = ZERO
    free_above: Decimal | None = None


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """
    Full price of an order, every monetary field rounded to 2 decimals.

    ``total`` always equals ``subtotal_net + vat_amount + shipping_amount``.
    """

    subtotal_gross: Decimal
    discount_amount: Decimal
    subtotal_net: Decimal
    vat_rate_percent: Decimal
    vat_amount: Decimal
    vat_label: str
    shipping_amount: Decimal
    total: Decimal
    currency: str
    shipping_zone_name: str = ""
    shipping_is_free: bool = False
    vat_zone: VatZone = VatZone.DOMESTIC
    warnings: tuple[PricingWarning, ...] = field(default=())
