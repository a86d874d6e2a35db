"""
Order entry for the two channels that price orders.

Back-office entry and Pro checkout share one pricing engine and differ only
in what they allow: shipping picked by hand, a flat order discount, or the
minimum order amount gate.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING

from django.db import transaction

from apps.orders.models import Order
from apps.orders.services import create_order, list_shipping_zones_with_rates, update_order_items
from core.config import get_settings
from core.logging import get_logger
from core.result import Result, failure, success
from services.pricing import (
    OrderPricingEngine,
    ReconciliationTransactionFailed,
    minimum_order_shortfall,
    pro_order_note,
    reconcile,
    zones_for_shipping_method,
)
from services.pricing.countries import is_eu_country, normalize_country
from services.pricing.types import ZERO
from services.vat_verification import VatVerificationOutcome, VatVerificationService

if TYPE_CHECKING:
    from collections.abc import Sequence

    from apps.orders.models import Customer
    from core.config import PricingSettings, Settings
    from services.pricing import (
        LineItem,
        OrderItemForm,
        PriceBreakdown,
        PricingError,
        ReconciliationPlan,
        ShippingZone,
    )
    from services.pricing import Customer as PricingCustomer

logger = get_logger(__name__)


class CheckoutErrorCode(str, Enum):
    """Reasons an order is refused by its channel."""

    EMPTY_ORDER = "empty_order"
    UNSUPPORTED_CURRENCY = "unsupported_currency"
    PRO_ACCOUNT_REQUIRED = "pro_account_required"
    BELOW_MINIMUM_ORDER = "below_minimum_order"


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """
    Order refused by a channel rule, not by pricing.

    Attributes:
        code: Error code.
        message: Message shown to the person ordering.
        details: Additional context (optional).
    """

    code: CheckoutErrorCode
    message: str
    details: str | None = None

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """
    An order as entered, before pricing.

    Attributes:
        customer: Ordering customer.
        items: Validated line items.
        channel: Back-office or Pro portal.
        currency: Order currency (default: configured currency).
        shipping_country: Destination when it differs from the customer's country.
        shipping_method: Carrier picked by hand (back-office only).
        manual_shipping_amount: Shipping cost typed by hand (back-office only).
        order_level_discount: Flat discount (back-office only).
        internal_notes: Notes kept on the order.
    """

    customer: Customer
    items: tuple[LineItem, ...]
    channel: str = Order.Channel.BACKOFFICE
    currency: str | None = None
    shipping_country: str = ""
    shipping_method: str = ""
    manual_shipping_amount: Decimal | None = None
    order_level_discount: Decimal = ZERO
    internal_notes: str = ""

    @property
    def is_pro(self) -> bool:
        """Check if the order comes from the Pro portal."""
        return self.channel == Order.Channel.PRO

    @property
    def is_manual_shipping(self) -> bool:
        """Check if shipping was picked by hand."""
        return bool(self.shipping_method) or self.manual_shipping_amount is not None


type CheckoutResult[T] = Result[T, PricingError | CheckoutError]


class CheckoutService:
    """
    Price and place orders for both channels.

    The Pro portal ignores hand-picked shipping and flat discounts: its
    shipping always comes from the configured zones and its discount from
    the customer's negotiated rate.
    """

    def __init__(
        self,
        pricing_settings: PricingSettings,
        vat_service: VatVerificationService | None = None,
    ) -> None:
        """
        Initialize the checkout service.

        Args:
            pricing_settings: Pricing settings passed to the engine.
            vat_service: VAT verification; without it, no number is validated.
        """
        self.settings = pricing_settings
        self.engine = OrderPricingEngine(pricing_settings)
        self._vat_service = vat_service

    @classmethod
    def from_settings(cls, settings: Settings) -> CheckoutService:
        """Build the service from application settings."""
        return cls(
            pricing_settings=settings.pricing,
            vat_service=VatVerificationService.from_settings(settings.vies),
        )

    def verify_vat(self, customer: Customer) -> VatVerificationOutcome:
        """
        Verify the customer's VAT number when it can change the VAT treatment.

        Only professionals from another EU country can get reverse charge, so
        nobody else triggers a register call.
        """
        country = normalize_country(customer.country)
        needs_check = (
            customer.is_professional
            and bool(customer.vat_number)
            and is_eu_country(country)
            and country != normalize_country(self.settings.seller_country)
        )
        if not needs_check or self._vat_service is None:
            return VatVerificationOutcome(validated=False)

        outcome = self._vat_service.is_validated_sync(customer.vat_number)
        logger.info(
            "VAT number checked",
            customer_id=str(customer.id),
            validated=outcome.validated,
            warning=outcome.warning.value if outcome.warning else None,
        )
        return outcome

    def zones_for(self, request: OrderRequest) -> Sequence[ShippingZone]:
        """Shipping zones the request is priced against."""
        if request.is_manual_shipping and not request.is_pro:
            return zones_for_shipping_method(
                request.shipping_method or None,
                request.manual_shipping_amount,
            )
        return list_shipping_zones_with_rates()

    def quote(
        self,
        request: OrderRequest,
        vat: VatVerificationOutcome | None = None,
    ) -> CheckoutResult[PriceBreakdown]:
        """
        Price an order request without saving anything.

        Args:
            request: Order as entered.
            vat: VAT verification outcome, verified here when not given.

        Returns:
            Result containing the PriceBreakdown, or the error that blocks it.
        """
        currency = (request.currency or self.settings.default_currency).upper()
        if not self.settings.is_supported_currency(currency):
            return failure(
                CheckoutError(
                    code=CheckoutErrorCode.UNSUPPORTED_CURRENCY,
                    message=f"Currency {currency} is not supported",
                    details=", ".join(self.settings.supported_currencies),
                )
            )

        if vat is None:
            vat = self.verify_vat(request.customer)

        return self.engine.price(
            list(request.items),
            request.customer.to_pricing(),
            self.zones_for(request),
            order_level_discount=ZERO if request.is_pro else request.order_level_discount,
            currency=currency,
            vat_validated=vat.validated,
            destination_country=request.shipping_country or None,
            extra_warnings=(vat.warning,) if vat.warning else (),
        )

    def place_order(self, request: OrderRequest) -> CheckoutResult[Order]:
        """
        Price and save an order.

        Pro orders must come from a professional account and reach the
        minimum order amount; they get an internal note recording the
        discount and VAT treatment.

        Returns:
            Result containing the saved Order, or the error that blocked it.
        """
        if not request.items:
            return failure(
                CheckoutError(code=CheckoutErrorCode.EMPTY_ORDER, message="Order has no items")
            )
        if request.is_pro and not request.customer.is_professional:
            return failure(
                CheckoutError(
                    code=CheckoutErrorCode.PRO_ACCOUNT_REQUIRED,
                    message="Pro orders require a professional account",
                )
            )

        vat = self.verify_vat(request.customer)
        priced = self.quote(request, vat)
        if priced.is_failure():
            logger.warning(
                "Order pricing failed",
                customer_id=str(request.customer.id),
                channel=str(request.channel),
                error=str(priced.error),
            )
            return priced

        breakdown = priced.unwrap()
        notes = request.internal_notes

        if request.is_pro:
            shortfall = minimum_order_shortfall(breakdown, self.settings)
            if shortfall > 0:
                return failure(
                    CheckoutError(
                        code=CheckoutErrorCode.BELOW_MINIMUM_ORDER,
                        message=(
                            f"Minimum order is {self.settings.minimum_pro_order_amount} "
                            f"{breakdown.currency}"
                        ),
                        details=f"missing={shortfall}",
                    )
                )
            note = pro_order_note(request.customer.to_pricing(), breakdown)
            notes = f"{note}\n{notes}" if notes else note

        manual = request.is_manual_shipping and not request.is_pro
        order = create_order(
            customer=request.customer,
            items=request.items,
            breakdown=breakdown,
            channel=request.channel,
            shipping_country=request.shipping_country,
            shipping_method=request.shipping_method if manual else "",
            manual_shipping_amount=request.manual_shipping_amount if manual else None,
            order_level_discount=ZERO if request.is_pro else request.order_level_discount,
            customer_discount_rate=request.customer.discount_rate,
            vat_validated=vat.validated,
            internal_notes=notes,
        )
        return success(order)

    def order_customer(self, order: Order) -> PricingCustomer:
        """The order's customer with the discount rate it was placed with."""
        return dataclasses.replace(
            order.customer.to_pricing(),
            discount_rate=order.customer_discount_rate,
        )

    def order_zones(self, order: Order) -> Sequence[ShippingZone]:
        """Shipping zones an existing order is repriced against."""
        if order.is_manual_shipping:
            return zones_for_shipping_method(
                order.shipping_method or None,
                order.manual_shipping_amount,
            )
        return list_shipping_zones_with_rates()

    def edit_items(
        self,
        order: Order,
        edited_items: Sequence[OrderItemForm],
    ) -> Result[Order, PricingError]:
        """
        Apply an edit of an order's items and rewrite its totals.

        The order row is locked for the whole edit, so concurrent edits of one
        order are applied one after the other. The surviving items are
        repriced with the order's own context: its customer discount rate,
        flat discount, currency, shipping choice and VAT verification.

        Returns:
            Result containing the updated Order, or a PricingError. A failed
            write leaves the order unchanged and returns
            RECONCILIATION_TRANSACTION_FAILED.
        """
        try:
            with transaction.atomic():
                locked = Order.objects.select_for_update().select_related("customer").get(pk=order.pk)
                planned = self.plan_edit(locked, edited_items)
                if planned.is_failure():
                    logger.warning(
                        "Order item edit rejected",
                        order_id=str(locked.id),
                        error=str(planned.error),
                    )
                    return planned
                return success(update_order_items(locked, planned.unwrap()))
        except ReconciliationTransactionFailed as e:
            return failure(e.as_error())

    def plan_edit(
        self,
        order: Order,
        edited_items: Sequence[OrderItemForm],
    ) -> Result[ReconciliationPlan, PricingError]:
        """Reconcile an edit against the order's stored items."""
        price_items = partial(
            self.engine.price,
            customer=self.order_customer(order),
            zones=self.order_zones(order),
            order_level_discount=order.order_level_discount,
            currency=order.currency,
            vat_validated=order.vat_validated,
            destination_country=order.destination_country,
        )
        existing = [item.to_pricing() for item in order.items.all()]
        return reconcile(existing, edited_items, price_items)


def get_checkout_service() -> CheckoutService:
    """Build a checkout service from the application settings."""
    return CheckoutService.from_settings(get_settings())
