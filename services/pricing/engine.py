"""Order pricing shared by back-office order entry and Pro checkout."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from services.pricing.shipping import resolve_shipping
from services.pricing.types import (
    ZERO,
    CartMetrics,
    PriceBreakdown,
    ShippingQuote,
    VatTreatment,
    round2,
)
from services.pricing.vat import VatClassifier

if TYPE_CHECKING:
    from collections.abc import Sequence

    from core.config import PricingSettings
    from core.result import Result
    from services.pricing.errors import PricingError, PricingWarning
    from services.pricing.types import Customer, LineItem, ShippingZone


class OrderPricingEngine:
    """
    Compute the price breakdown of an order.

    Pure and stateless apart from its settings: the same inputs always give
    the same breakdown, and an instance can be shared between requests.

    Amounts are carried unrounded through the computation and rounded once
    on output. VAT and shipping are rounded before being added into the
    total because they are displayed on their own.
    """

    def __init__(self, settings: PricingSettings) -> None:
        """
        Initialize the engine.

        Args:
            settings: Seller country, VAT rate and currency settings.
        """
        self.settings = settings
        self.classifier = VatClassifier(
            seller_country=settings.seller_country,
            standard_rate_percent=settings.standard_vat_rate_percent,
        )

    def price(
        self,
        items: Sequence[LineItem],
        customer: Customer,
        zones: Sequence[ShippingZone],
        order_level_discount: Decimal = ZERO,
        currency: str | None = None,
        vat_override: VatTreatment | None = None,
        *,
        vat_validated: bool = False,
        destination_country: str | None = None,
        extra_warnings: Sequence[PricingWarning] = (),
    ) -> Result[PriceBreakdown, PricingError]:
        """
        Price an order.

        Args:
            items: Validated line items.
            customer: Buyer; supplies the country, VAT number and discount rate.
            zones: Shipping zones in operator-curated order.
            order_level_discount: Flat discount entered on the order.
            currency: Order currency (defaults to the configured one).
            vat_override: Pre-resolved VAT treatment, skipping classification.
            vat_validated: Whether the buyer's VAT number passed verification.
            destination_country: Shipping country when it differs from the
                customer's own country.
            extra_warnings: Warnings raised upstream (e.g. VAT verification)
                to carry on the breakdown.

        Returns:
            Result containing the PriceBreakdown, or the shipping PricingError
            when no zone applies.
        """
        if order_level_discount < 0:
            msg = "order_level_discount cannot be negative"
            raise ValueError(msg)

        subtotal_gross = sum((item.gross_amount for item in items), ZERO)

        discount = subtotal_gross * (customer.discount_rate or ZERO) + order_level_discount
        discount = min(discount, subtotal_gross)
        subtotal_net = subtotal_gross - discount

        address = customer.address
        vat = vat_override or self.classifier.classify(
            buyer_country=address.country,
            customer_type=customer.customer_type,
            vat_number=address.vat_number,
            vat_validated=vat_validated,
        )
        vat_amount = round2(subtotal_net * vat.rate_percent / Decimal("100"))

        cart = CartMetrics.from_items(items, subtotal_net)
        destination = destination_country if destination_country is not None else customer.country
        shipping = resolve_shipping(zones, destination, cart)

        return shipping.map(
            lambda quote: self._breakdown(
                subtotal_gross=subtotal_gross,
                discount=discount,
                subtotal_net=subtotal_net,
                vat=vat,
                vat_amount=vat_amount,
                shipping=quote,
                currency=(currency or self.settings.default_currency).upper(),
                warnings=(*extra_warnings, *vat.warnings),
            )
        )

    @staticmethod
    def _breakdown(
        *,
        subtotal_gross: Decimal,
        discount: Decimal,
        subtotal_net: Decimal,
        vat: VatTreatment,
        vat_amount: Decimal,
        shipping: ShippingQuote,
        currency: str,
        warnings: tuple[PricingWarning, ...],
    ) -> PriceBreakdown:
        total = max(round2(subtotal_net + vat_amount + shipping.amount), round2(ZERO))
        return PriceBreakdown(
            subtotal_gross=round2(subtotal_gross),
            discount_amount=round2(discount),
            subtotal_net=round2(subtotal_net),
            vat_rate_percent=vat.rate_percent,
            vat_amount=vat_amount,
            vat_label=vat.label,
            shipping_amount=shipping.amount,
            total=total,
            currency=currency,
            shipping_zone_name=shipping.zone_name,
            shipping_is_free=shipping.is_free,
            vat_zone=vat.zone,
            warnings=tuple(dict.fromkeys(warnings)),
        )


def minimum_order_shortfall(breakdown: PriceBreakdown, settings: PricingSettings) -> Decimal:
    """
    Amount still missing before a Pro order may be submitted.

    The engine always prices; blocking submission is the caller's decision.
    """
    missing = settings.minimum_pro_order_amount - breakdown.subtotal_net
    return round2(max(missing, ZERO))


def pro_order_note(customer: Customer, breakdown: PriceBreakdown) -> str:
    """Internal note stored on orders placed through the Pro portal."""
    rate = (customer.discount_rate or ZERO) * 100
    pct = format(rate.normalize(), "f") if rate else "0"
    return f"Commande Pro - Remise {pct}% - {breakdown.vat_label}"
