"""Admin configuration for orders app."""

from django.contrib import admin

from .models import Customer, Order, OrderItem, ShippingRate, ShippingZone


class ShippingRateInline(admin.StackedInline):
    """Inline admin for the rate of a shipping zone."""

    model = ShippingRate
    extra = 1
    max_num = 1


@admin.register(ShippingZone)
class ShippingZoneAdmin(admin.ModelAdmin):
    """Admin configuration for ShippingZone model."""

    list_display = ("name", "position", "countries", "is_active", "updated_at")
    list_editable = ("position", "is_active")
    search_fields = ("name",)
    inlines = [ShippingRateInline]


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    """Admin configuration for Customer model."""

    list_display = ("name", "customer_type", "country", "vat_number", "discount_rate")
    list_filter = ("customer_type",)
    search_fields = ("name", "email", "vat_number")
    readonly_fields = ("id", "created_at", "updated_at")


class OrderItemInline(admin.TabularInline):
    """Inline admin for items of an order."""

    model = OrderItem
    extra = 0
    can_delete = False
    fields = ("title", "product_id", "unit_price", "quantity", "weight_kg", "total_price")
    readonly_fields = fields

    def has_add_permission(self, request: object, obj: object = None) -> bool:
        """Items are edited through the order API so totals stay in sync."""
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin configuration for Order model.

    Totals are read-only; they are written by the order services only.
    """

    list_display = ("id", "customer", "channel", "status", "total", "currency", "created_at")
    list_filter = ("channel", "status", "currency")
    search_fields = ("customer__name", "customer__email")
    readonly_fields = (
        "id",
        "subtotal_gross",
        "discount_amount",
        "subtotal",
        "tax_rate",
        "tax_label",
        "tax_amount",
        "shipping_amount",
        "shipping_zone_name",
        "total",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]
    date_hierarchy = "created_at"
