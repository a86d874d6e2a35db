"""
Persistence boundary for orders.

Loads the shipping-zone configuration for the pricing core and writes
priced orders. Every write of items happens in the same transaction as the
write of the order totals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import DatabaseError, transaction
from django.db.models import Max

from apps.orders.models import Order, OrderItem, ShippingRate, ShippingZone
from core.logging import get_logger
from services.pricing import ReconciliationTransactionFailed, line_total

if TYPE_CHECKING:
    from collections.abc import Sequence

    from apps.orders.models import Customer
    from services.pricing import LineItem, PriceBreakdown, ReconciliationPlan
    from services.pricing import ShippingZone as PricingShippingZone

logger = get_logger(__name__)


def list_shipping_zones_with_rates() -> list[PricingShippingZone]:
    """
    Load the active shipping zones in operator-curated order.

    Zones without a configured rate cannot be priced and are skipped.

    Returns:
        Zones converted for the pricing core, ordered by position.
    """
    zones: list[PricingShippingZone] = []
    queryset = ShippingZone.objects.filter(is_active=True).select_related("rate")

    for zone in queryset.order_by("position", "created_at"):
        try:
            zones.append(zone.to_pricing())
        except ShippingRate.DoesNotExist:
            logger.warning("Shipping zone has no rate, skipping", zone=zone.name)
    return zones


def apply_breakdown(order: Order, breakdown: PriceBreakdown) -> None:
    """Copy a price breakdown onto the order's total fields (not saved)."""
    order.subtotal_gross = breakdown.subtotal_gross
    order.discount_amount = breakdown.discount_amount
    order.subtotal = breakdown.subtotal_net
    order.tax_rate = breakdown.vat_rate_percent
    order.tax_label = breakdown.vat_label
    order.tax_amount = breakdown.vat_amount
    order.shipping_amount = breakdown.shipping_amount
    order.shipping_zone_name = breakdown.shipping_zone_name
    order.total = breakdown.total
    order.currency = breakdown.currency


TOTAL_FIELDS = [
    "subtotal_gross",
    "discount_amount",
    "subtotal",
    "tax_rate",
    "tax_label",
    "tax_amount",
    "shipping_amount",
    "shipping_zone_name",
    "total",
    "currency",
    "updated_at",
]


def _build_item(order: Order, item: LineItem, position: int) -> OrderItem:
    return OrderItem(
        order=order,
        product_id=item.product_id,
        title=item.title,
        unit_price=item.unit_price,
        quantity=item.quantity,
        weight_kg=item.weight_kg,
        total_price=line_total(item.quantity, item.unit_price),
        position=position,
    )


def create_order(
    *,
    customer: Customer,
    items: Sequence[LineItem],
    breakdown: PriceBreakdown,
    **header: object,
) -> Order:
    """
    Persist an order and its items in one transaction.

    Args:
        customer: Ordering customer.
        items: Priced line items, stored in this order.
        breakdown: Price of the items, written onto the order.
        **header: Other Order fields (channel, shipping_country, notes...).

    Returns:
        The saved Order.
    """
    with transaction.atomic():
        order = Order(customer=customer, **header)
        apply_breakdown(order, breakdown)
        order.save()
        OrderItem.objects.bulk_create(
            [_build_item(order, item, position) for position, item in enumerate(items)]
        )

    logger.info(
        "Order created",
        order_id=str(order.id),
        channel=order.channel,
        item_count=len(items),
        total=str(order.total),
    )
    return order


def update_order_items(order: Order, plan: ReconciliationPlan) -> Order:
    """
    Apply a reconciliation plan and the new totals atomically.

    Args:
        order: Order being edited.
        plan: Item mutations and recomputed breakdown.

    Returns:
        The updated Order.

    Raises:
        ReconciliationTransactionFailed: If any write failed. Nothing was
            applied; the order keeps its previous items and totals.
    """
    previous = {name: getattr(order, name) for name in TOTAL_FIELDS}
    try:
        with transaction.atomic():
            if plan.has_item_changes:
                _write_items(order, plan)

            apply_breakdown(order, plan.new_breakdown)
            order.save(update_fields=TOTAL_FIELDS)
    except DatabaseError as e:
        logger.error("Order item update failed", order_id=str(order.id), error=str(e))
        for name, value in previous.items():
            setattr(order, name, value)
        raise ReconciliationTransactionFailed(order.id) from e

    logger.info(
        "Order items reconciled",
        order_id=str(order.id),
        created=len(plan.to_create),
        updated=len(plan.to_update),
        deleted=len(plan.to_delete),
        total=str(order.total),
    )
    return order


def _write_items(order: Order, plan: ReconciliationPlan) -> None:
    """Delete, update then insert items; new items go after the survivors."""
    if plan.to_delete:
        OrderItem.objects.filter(order=order, id__in=plan.to_delete).delete()

    for update in plan.to_update:
        OrderItem.objects.filter(order=order, id=update.id).update(
            product_id=update.item.product_id,
            title=update.item.title,
            unit_price=update.item.unit_price,
            quantity=update.item.quantity,
            weight_kg=update.item.weight_kg,
            total_price=update.total_price,
        )

    if plan.to_create:
        last = order.items.aggregate(last=Max("position"))["last"]
        start = 0 if last is None else last + 1
        OrderItem.objects.bulk_create(
            [
                _build_item(order, insert.item, start + offset)
                for offset, insert in enumerate(plan.to_create)
            ]
        )
