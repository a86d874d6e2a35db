"""API serializers for pricing and orders."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from rest_framework import serializers

from apps.orders.models import Order, OrderItem, ShippingRate, ShippingZone
from services.pricing import LineItem, OrderItemForm
from services.pricing.shipping_methods import SHIPPING_METHODS

MONEY = {"max_digits": 12, "decimal_places": 2}


class LineItemInputSerializer(serializers.Serializer):
    """Serializer for one line item as entered."""

    product_id = serializers.CharField(
        max_length=100,
        required=False,
        allow_null=True,
        allow_blank=True,
        default=None,
        help_text="Catalog product; empty for a manual line",
    )
    title = serializers.CharField(max_length=255)
    unit_price = serializers.DecimalField(**MONEY, min_value=Decimal("0"))
    quantity = serializers.IntegerField(min_value=1)
    weight_kg = serializers.DecimalField(
        max_digits=8,
        decimal_places=3,
        min_value=Decimal("0"),
        required=False,
        allow_null=True,
        default=None,
    )

    @staticmethod
    def to_line_item(data: dict[str, Any]) -> LineItem:
        """Build a LineItem from validated data."""
        return LineItem(
            title=data["title"],
            unit_price=data["unit_price"],
            quantity=data["quantity"],
            product_id=data.get("product_id") or None,
            weight_kg=data.get("weight_kg"),
        )


class OrderRequestSerializer(serializers.Serializer):
    """Serializer for an order (or quote) request."""

    customer_id = serializers.UUIDField()
    items = LineItemInputSerializer(many=True, allow_empty=False)
    channel = serializers.ChoiceField(
        choices=Order.Channel.choices,
        default=Order.Channel.BACKOFFICE,
    )
    currency = serializers.CharField(max_length=3, required=False, allow_null=True, default=None)
    shipping_country = serializers.CharField(
        max_length=100,
        required=False,
        allow_blank=True,
        default="",
        help_text="Destination when it differs from the customer's country",
    )
    shipping_method = serializers.CharField(
        max_length=50,
        required=False,
        allow_blank=True,
        default="",
        help_text=f"Manual carrier, e.g. {', '.join(m.value for m in SHIPPING_METHODS)}",
    )
    manual_shipping_amount = serializers.DecimalField(
        **MONEY,
        min_value=Decimal("0"),
        required=False,
        allow_null=True,
        default=None,
    )
    order_level_discount = serializers.DecimalField(
        **MONEY,
        min_value=Decimal("0"),
        required=False,
        default=Decimal("0"),
    )
    internal_notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderItemEditSerializer(LineItemInputSerializer):
    """Serializer for one line of an order edit."""

    id = serializers.UUIDField(required=False, allow_null=True, default=None)
    is_new = serializers.BooleanField(default=False)
    is_deleted = serializers.BooleanField(default=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """Existing lines must carry their id."""
        if not attrs["is_new"] and attrs.get("id") is None:
            raise serializers.ValidationError({"id": "Required unless is_new is true."})
        return attrs

    @classmethod
    def to_form(cls, data: dict[str, Any]) -> OrderItemForm:
        """Build an OrderItemForm from validated data."""
        item_id = data.get("id")
        return OrderItemForm(
            item=cls.to_line_item(data),
            id=str(item_id) if item_id is not None else None,
            is_new=data["is_new"],
            is_deleted=data["is_deleted"],
        )


class OrderItemsEditSerializer(serializers.Serializer):
    """Serializer for an edit of an order's items."""

    items = OrderItemEditSerializer(many=True, allow_empty=False)


class PriceBreakdownSerializer(serializers.Serializer):
    """Serializer for a computed price breakdown."""

    subtotal_gross = serializers.DecimalField(**MONEY)
    discount_amount = serializers.DecimalField(**MONEY)
    subtotal_net = serializers.DecimalField(**MONEY)
    vat_rate_percent = serializers.DecimalField(max_digits=5, decimal_places=2)
    vat_amount = serializers.DecimalField(**MONEY)
    vat_label = serializers.CharField()
    vat_zone = serializers.CharField(source="vat_zone.value")
    shipping_amount = serializers.DecimalField(**MONEY)
    shipping_zone_name = serializers.CharField()
    shipping_is_free = serializers.BooleanField()
    total = serializers.DecimalField(**MONEY)
    currency = serializers.CharField()
    warnings = serializers.SerializerMethodField()

    def get_warnings(self, obj: Any) -> list[str]:
        """Return warning codes."""
        return [w.value for w in obj.warnings]


class OrderItemSerializer(serializers.ModelSerializer):
    """Serializer for OrderItem model."""

    class Meta:
        """Meta options for OrderItemSerializer."""

        model = OrderItem
        fields = [
            "id",
            "product_id",
            "title",
            "unit_price",
            "quantity",
            "weight_kg",
            "total_price",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Serializer for Order model with its items."""

    items = OrderItemSerializer(many=True, read_only=True)
    customer_id = serializers.UUIDField(read_only=True)

    class Meta:
        """Meta options for OrderSerializer."""

        model = Order
        fields = [
            "id",
            "customer_id",
            "channel",
            "status",
            "currency",
            "shipping_country",
            "shipping_method",
            "subtotal_gross",
            "discount_amount",
            "subtotal",
            "tax_rate",
            "tax_label",
            "tax_amount",
            "shipping_amount",
            "shipping_zone_name",
            "total",
            "vat_validated",
            "internal_notes",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class ShippingRateSerializer(serializers.ModelSerializer):
    """Serializer for ShippingRate model."""

    class Meta:
        """Meta options for ShippingRateSerializer."""

        model = ShippingRate
        fields = ["rate_type", "base_price", "per_kg_price", "per_item_price", "free_above"]


class ShippingZoneSerializer(serializers.ModelSerializer):
    """Serializer for ShippingZone model with its rate."""

    rate = ShippingRateSerializer(read_only=True)

    class Meta:
        """Meta options for ShippingZoneSerializer."""

        model = ShippingZone
        fields = ["id", "name", "countries", "position", "rate"]


class ErrorSerializer(serializers.Serializer):
    """Serializer for pricing and checkout errors."""

    code = serializers.CharField(source="code.value")
    message = serializers.CharField()
    details = serializers.CharField(allow_null=True)
