"""Shipping zone matching and rate evaluation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.result import Result, failure, success
from services.pricing.countries import normalize_country
from services.pricing.errors import (
    InvalidZoneConfigurationError,
    PricingError,
    ZoneNotFoundError,
)
from services.pricing.types import (
    ZERO,
    CartMetrics,
    ShippingQuote,
    ShippingRate,
    ShippingZone,
    round2,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal


def validate_zones(zones: Sequence[ShippingZone]) -> Result[None, PricingError]:
    """
    Check the zone list invariants.

    At most one zone may be the "*" fallback.
    """
    fallbacks = [z.name for z in zones if z.is_fallback]
    if len(fallbacks) > 1:
        return failure(
            InvalidZoneConfigurationError(
                f"more than one fallback zone: {', '.join(fallbacks)}",
            )
        )
    return success(None)


def match_zone(
    zones: Sequence[ShippingZone],
    destination_country: str | None,
) -> Result[ShippingZone, PricingError]:
    """
    Select the zone for a destination.

    Zones listing the country explicitly are tried in the given order and the
    first one wins. The fallback zone is used only when none of them matched,
    wherever it sits in the list.

    Args:
        zones: Zones in operator-curated order.
        destination_country: Country code or name of the destination.

    Returns:
        Result containing the matched zone, or ZONE_NOT_FOUND when there is
        no match and no fallback zone.
    """
    valid = validate_zones(zones)
    if valid.is_failure():
        return valid

    code = normalize_country(destination_country)
    fallback: ShippingZone | None = None

    for zone in zones:
        if zone.is_fallback:
            fallback = zone
        elif zone.covers(code):
            return success(zone)

    if fallback is None:
        return failure(ZoneNotFoundError(code or (destination_country or "")))
    return success(fallback)


def rate_cost(rate: ShippingRate, total_weight_kg: Decimal, item_count: int) -> Decimal:
    """
    Evaluate a rate formula, unrounded.

    The first item is included in the base price.
    """
    cost = rate.base_price
    if rate.uses_weight:
        cost += (rate.per_kg_price or ZERO) * total_weight_kg
    if rate.uses_items:
        cost += (rate.per_item_price or ZERO) * max(0, item_count - 1)
    return cost


def quote_for_zone(zone: ShippingZone, cart: CartMetrics) -> ShippingQuote:
    """Price shipping for a cart in an already matched zone."""
    rate = zone.rate
    cost = rate_cost(rate, cart.total_weight_kg, cart.item_count)
    is_free = rate.free_above is not None and cart.subtotal_net >= rate.free_above

    return ShippingQuote(
        amount=round2(ZERO) if is_free else round2(cost),
        is_free=is_free,
        zone_name=zone.name,
        zone_id=zone.id,
        cost_before_free=round2(cost),
        free_above=rate.free_above,
    )


def resolve_shipping(
    zones: Sequence[ShippingZone],
    destination_country: str | None,
    cart: CartMetrics,
) -> Result[ShippingQuote, PricingError]:
    """
    Resolve the shipping cost of a cart.

    Args:
        zones: Zones in operator-curated order.
        destination_country: Country code or name of the destination.
        cart: Net subtotal, weight and item count of the cart.

    Returns:
        Result containing the ShippingQuote, or a PricingError when no zone
        applies or the configuration is invalid.
    """
    return match_zone(zones, destination_country).map(lambda zone: quote_for_zone(zone, cart))
