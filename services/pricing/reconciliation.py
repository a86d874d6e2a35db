"""
Order-item reconciliation.

Diffs the edited lines of an order against its persisted items and derives
the create/update/delete instructions, together with the recomputed price
of the surviving items. Applying the plan is the persistence layer's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from core.result import Result, failure, success
from services.pricing.errors import DuplicateOrderItemError, PricingError, UnknownOrderItemError
from services.pricing.types import LineItem, PriceBreakdown, line_total

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    type PriceItems = Callable[[Sequence[LineItem]], Result[PriceBreakdown, PricingError]]

# Fields compared to decide whether an existing line needs an update
TRACKED_FIELDS = ("title", "unit_price", "quantity", "product_id", "weight_kg")


class EditKind(str, Enum):
    """What happened to a line while editing."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class OrderItem:
    """
    Persisted order line, a snapshot of the item at order time.

    Attributes:
        id: Order item identifier.
        item: Line content.
        total_price: Rounded line total as stored.
    """

    id: str
    item: LineItem

    @property
    def total_price(self) -> Decimal:
        """Rounded line total."""
        return line_total(self.item.quantity, self.item.unit_price)


@dataclass(frozen=True, slots=True)
class OrderItemForm:
    """
    One line as submitted by the order editing form.

    Attributes:
        item: Line content after editing.
        id: Identifier of the persisted item, absent for new lines.
        is_new: Line was added during this edit.
        is_deleted: Line was removed during this edit.
    """

    item: LineItem
    id: str | None = None
    is_new: bool = False
    is_deleted: bool = False


@dataclass(frozen=True, slots=True)
class LineEdit:
    """A line tagged with what happened to it."""

    kind: EditKind
    item: LineItem
    id: str | None = None
    changed_fields: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OrderItemInsert:
    """Instruction to create an order item."""

    item: LineItem

    @property
    def total_price(self) -> Decimal:
        """Rounded line total."""
        return line_total(self.item.quantity, self.item.unit_price)


@dataclass(frozen=True, slots=True)
class OrderItemUpdate:
    """Instruction to overwrite an existing order item."""

    id: str
    item: LineItem
    changed_fields: tuple[str, ...]

    @property
    def total_price(self) -> Decimal:
        """Rounded line total."""
        return line_total(self.item.quantity, self.item.unit_price)


@dataclass(frozen=True, slots=True)
class ReconciliationPlan:
    """
    Mutations to apply to one order, atomically with its new totals.

    Attributes:
        to_create: Items to insert.
        to_update: Items to overwrite (only those that actually changed).
        to_delete: Identifiers of items to remove.
        new_breakdown: Price of the surviving items.
        surviving_items: Lines the order holds once the plan is applied.
    """

    to_create: tuple[OrderItemInsert, ...]
    to_update: tuple[OrderItemUpdate, ...]
    to_delete: tuple[str, ...]
    new_breakdown: PriceBreakdown
    surviving_items: tuple[LineItem, ...]

    @property
    def has_item_changes(self) -> bool:
        """Check if any item needs to be written."""
        return bool(self.to_create or self.to_update or self.to_delete)


def changed_fields(before: LineItem, after: LineItem) -> tuple[str, ...]:
    """Names of the tracked fields that differ between two lines."""
    return tuple(
        name for name in TRACKED_FIELDS if getattr(before, name) != getattr(after, name)
    )


def tag_edits(
    existing_items: Sequence[OrderItem],
    edited_items: Sequence[OrderItemForm],
) -> Result[list[LineEdit], PricingError]:
    """
    Turn form flags into tagged edits.

    New lines deleted before saving are dropped. Persisted items that the
    form does not mention are kept unchanged.

    Returns:
        Result containing the edits, or UNKNOWN_ORDER_ITEM when a line
        refers to an item that is not on the order, or
        DUPLICATE_ORDER_ITEM when two lines refer to the same item.
    """
    existing = {i.id: i for i in existing_items}
    seen: set[str] = set()
    edits: list[LineEdit] = []

    for form in edited_items:
        if form.is_new:
            if not form.is_deleted:
                edits.append(LineEdit(kind=EditKind.CREATED, item=form.item))
            continue

        if form.id is None or form.id not in existing:
            return failure(UnknownOrderItemError(str(form.id)))
        if form.id in seen:
            return failure(DuplicateOrderItemError(form.id))
        seen.add(form.id)

        if form.is_deleted:
            edits.append(LineEdit(kind=EditKind.DELETED, item=form.item, id=form.id))
            continue

        diff = changed_fields(existing[form.id].item, form.item)
        kind = EditKind.UPDATED if diff else EditKind.UNCHANGED
        edits.append(LineEdit(kind=kind, item=form.item, id=form.id, changed_fields=diff))

    edits.extend(
        LineEdit(kind=EditKind.UNCHANGED, item=i.item, id=i.id)
        for i in existing_items
        if i.id not in seen
    )
    return success(edits)


def plan_from_edits(
    edits: Sequence[LineEdit],
    price_items: PriceItems,
) -> Result[ReconciliationPlan, PricingError]:
    """Build the reconciliation plan and reprice the surviving lines."""
    surviving = tuple(e.item for e in edits if e.kind != EditKind.DELETED)

    return price_items(surviving).map(
        lambda breakdown: ReconciliationPlan(
            to_create=tuple(OrderItemInsert(item=e.item) for e in edits if e.kind == EditKind.CREATED),
            to_update=tuple(
                OrderItemUpdate(id=e.id, item=e.item, changed_fields=e.changed_fields)
                for e in edits
                if e.kind == EditKind.UPDATED and e.id is not None
            ),
            to_delete=tuple(e.id for e in edits if e.kind == EditKind.DELETED and e.id is not None),
            new_breakdown=breakdown,
            surviving_items=surviving,
        )
    )


def reconcile(
    existing_items: Sequence[OrderItem],
    edited_items: Sequence[OrderItemForm],
    price_items: PriceItems,
) -> Result[ReconciliationPlan, PricingError]:
    """
    Reconcile an edited order against its persisted items.

    Args:
        existing_items: Items currently stored for the order.
        edited_items: Lines submitted by the editing form.
        price_items: Prices a list of lines with the order's pricing context,
            typically a ``functools.partial`` over ``OrderPricingEngine.price``.

    Returns:
        Result containing the ReconciliationPlan, or a PricingError.
    """
    return tag_edits(existing_items, edited_items).and_then(
        lambda edits: plan_from_edits(edits, price_items)
    )
