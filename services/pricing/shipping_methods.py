"""Carrier picklist used for manual back-office orders."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from services.pricing.types import WILDCARD, RateType, ShippingRate, ShippingZone


@dataclass(frozen=True, slots=True)
class ShippingMethod:
    """A carrier the operator can pick, with its default flat cost."""

    value: str
    label: str
    default_cost: Decimal


SHIPPING_METHODS: tuple[ShippingMethod, ...] = (
    ShippingMethod("Colissimo", "Colissimo", Decimal("6.50")),
    ShippingMethod("Mondial Relay", "Mondial Relay", Decimal("4.50")),
    ShippingMethod("Livraison standard", "Livraison standard", Decimal("5.00")),
    ShippingMethod("DHL Express", "DHL Express", Decimal("15.00")),
    ShippingMethod("UPS", "UPS", Decimal("12.00")),
    ShippingMethod("Retrait", "Retrait", Decimal("0")),
    ShippingMethod("Autre", "Autre", Decimal("0")),
)


def get_shipping_method(value: str) -> ShippingMethod | None:
    """Look up a carrier by its value (case-insensitive)."""
    wanted = value.strip().lower()
    return next((m for m in SHIPPING_METHODS if m.value.lower() == wanted), None)


def zones_for_shipping_method(
    method: str | None,
    amount: Decimal | None = None,
) -> tuple[ShippingZone, ...]:
    """
    Express a manual shipping choice as a single flat fallback zone.

    An explicit ``amount`` (typed by the operator) wins over the carrier's
    default cost; an unknown carrier without an amount ships at 0.

    Returns:
        A one-zone list that matches every destination.
    """
    known = get_shipping_method(method) if method else None
    if amount is None:
        amount = known.default_cost if known else Decimal("0")
    name = known.label if known else (method or "Manuel")

    return (
        ShippingZone(
            id=f"manual:{name}",
            name=name,
            countries=(WILDCARD,),
            rate=ShippingRate(rate_type=RateType.FLAT, base_price=amount),
        ),
    )
