"""Models for the orders application."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from services.pricing import (
    CustomerType,
    LineItem,
    RateType,
)
from services.pricing import Customer as PricingCustomer
from services.pricing import OrderItem as PricingOrderItem
from services.pricing import ShippingRate as PricingShippingRate
from services.pricing import ShippingZone as PricingShippingZone

MONEY = {"max_digits": 12, "decimal_places": 2}


class Customer(models.Model):
    """
    A shop customer, individual or professional.

    Professional customers may carry a negotiated discount and an
    intra-community VAT number.
    """

    class Type(models.TextChoices):
        """Customer category."""

        PARTICULIER = CustomerType.PARTICULIER.value, "Particulier"
        PROFESSIONNEL = CustomerType.PROFESSIONNEL.value, "Professionnel"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    customer_type = models.CharField(
        max_length=20,
        choices=Type.choices,
        default=Type.PARTICULIER,
    )
    country = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="ISO-2 code or country name",
    )
    vat_number = models.CharField(max_length=20, blank=True, default="")
    discount_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="Negotiated discount as a fraction (0.10 = 10%)",
    )
    payment_terms_days = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Meta options for Customer model."""

        db_table = "customers"
        ordering = ["name"]
        verbose_name = "Customer"
        verbose_name_plural = "Customers"

    def __str__(self) -> str:
        """Return string representation of customer."""
        return self.name

    @property
    def is_professional(self) -> bool:
        """Check if the customer is a professional."""
        return self.customer_type == self.Type.PROFESSIONNEL

    def to_pricing(self) -> PricingCustomer:
        """Convert to the pricing core's Customer."""
        return PricingCustomer(
            country=self.country,
            customer_type=CustomerType(self.customer_type),
            vat_number=self.vat_number or None,
            discount_rate=self.discount_rate,
            payment_terms_days=self.payment_terms_days,
            id=str(self.id),
            name=self.name,
        )


class ShippingZone(models.Model):
    """
    Group of destination countries sharing one shipping rate.

    Zones are matched in ``position`` order; a zone listing "*" is the
    rest-of-world fallback.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    countries = models.JSONField(
        default=list,
        blank=True,
        help_text='ISO-2 country codes, or ["*"] for rest of world',
    )
    position = models.PositiveIntegerField(default=0, help_text="Matching order")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Meta options for ShippingZone model."""

        db_table = "shipping_zones"
        ordering = ["position", "created_at"]
        verbose_name = "Shipping zone"
        verbose_name_plural = "Shipping zones"

    def __str__(self) -> str:
        """Return string representation of zone."""
        return self.name

    def to_pricing(self) -> PricingShippingZone:
        """
        Convert to the pricing core's ShippingZone.

        Raises:
            ShippingRate.DoesNotExist: If the zone has no rate configured.
        """
        return PricingShippingZone(
            id=str(self.id),
            name=self.name,
            countries=tuple(self.countries or ()),
            rate=self.rate.to_pricing(),
        )


class ShippingRate(models.Model):
    """Rate formula of a shipping zone."""

    class Type(models.TextChoices):
        """Rate formula."""

        FLAT = RateType.FLAT.value, "Forfait"
        PER_WEIGHT = RateType.PER_WEIGHT.value, "Au poids"
        PER_ITEM = RateType.PER_ITEM.value, "À l'article"
        COMBINED = RateType.COMBINED.value, "Poids et articles"

    zone = models.OneToOneField(
        ShippingZone,
        on_delete=models.CASCADE,
        related_name="rate",
    )
    rate_type = models.CharField(max_length=20, choices=Type.choices, default=Type.FLAT)
    base_price = models.DecimalField(
        **MONEY,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    per_kg_price = models.DecimalField(
        **MONEY,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    per_item_price = models.DecimalField(
        **MONEY,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Price per item beyond the first",
    )
    free_above = models.DecimalField(
        **MONEY,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Net subtotal from which shipping is free",
    )

    class Meta:
        """Meta options for ShippingRate model."""

        db_table = "shipping_rates"
        verbose_name = "Shipping rate"
        verbose_name_plural = "Shipping rates"

    def __str__(self) -> str:
        """Return string representation of rate."""
        return f"{self.zone.name} ({self.get_rate_type_display()})"

    def to_pricing(self) -> PricingShippingRate:
        """Convert to the pricing core's ShippingRate."""
        return PricingShippingRate(
            rate_type=RateType(self.rate_type),
            base_price=self.base_price,
            per_kg_price=self.per_kg_price,
            per_item_price=self.per_item_price,
            free_above=self.free_above,
        )


class Order(models.Model):
    """
    A priced order.

    Totals are stored as computed at save time and rewritten together with
    the items whenever the items are edited.
    """

    class Channel(models.TextChoices):
        """Where the order was entered."""

        BACKOFFICE = "backoffice", "Back-office"
        PRO = "pro", "Portail Pro"

    class Status(models.TextChoices):
        """Order lifecycle status."""

        PENDING = "pending", "En attente"
        CONFIRMED = "confirmed", "Confirmée"
        SHIPPED = "shipped", "Expédiée"
        CANCELLED = "cancelled", "Annulée"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    channel = models.CharField(max_length=20, choices=Channel.choices, default=Channel.BACKOFFICE)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    currency = models.CharField(max_length=3, default="EUR")
    shipping_country = models.CharField(max_length=100, blank=True, default="")
    shipping_method = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Manual carrier; empty when shipping comes from the zones",
    )
    manual_shipping_amount = models.DecimalField(**MONEY, null=True, blank=True)
    order_level_discount = models.DecimalField(**MONEY, default=Decimal("0"))
    customer_discount_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Customer discount rate when the order was placed",
    )
    vat_validated = models.BooleanField(
        default=False,
        help_text="VAT number confirmed by VIES when the order was placed",
    )

    subtotal_gross = models.DecimalField(**MONEY, default=Decimal("0"))
    discount_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    subtotal = models.DecimalField(**MONEY, default=Decimal("0"), help_text="Net of discounts")
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    tax_label = models.CharField(max_length=100, blank=True, default="")
    tax_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    shipping_amount = models.DecimalField(**MONEY, default=Decimal("0"))
    shipping_zone_name = models.CharField(max_length=100, blank=True, default="")
    total = models.DecimalField(**MONEY, default=Decimal("0"))

    internal_notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Meta options for Order model."""

        db_table = "orders"
        ordering = ["-created_at"]
        verbose_name = "Order"
        verbose_name_plural = "Orders"

    def __str__(self) -> str:
        """Return string representation of order."""
        return f"Order {self.id}"

    @property
    def destination_country(self) -> str:
        """Shipping country, defaulting to the customer's country."""
        return self.shipping_country or self.customer.country

    @property
    def is_manual_shipping(self) -> bool:
        """Check if shipping was chosen by hand rather than from the zones."""
        return bool(self.shipping_method) or self.manual_shipping_amount is not None


class OrderItem(models.Model):
    """
    One line of an order.

    Title, price and weight are snapshots taken at order time; a missing
    ``product_id`` marks a manual line.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id = models.CharField(max_length=100, null=True, blank=True)
    title = models.CharField(max_length=255)
    unit_price = models.DecimalField(**MONEY)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    weight_kg = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    total_price = models.DecimalField(**MONEY)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Meta options for OrderItem model."""

        db_table = "order_items"
        ordering = ["position", "created_at"]
        verbose_name = "Order item"
        verbose_name_plural = "Order items"

    def __str__(self) -> str:
        """Return string representation of item."""
        return f"{self.quantity} x {self.title}"

    def to_line_item(self) -> LineItem:
        """Convert to the pricing core's LineItem."""
        return LineItem(
            title=self.title,
            unit_price=self.unit_price,
            quantity=self.quantity,
            product_id=self.product_id,
            weight_kg=self.weight_kg,
        )

    def to_pricing(self) -> PricingOrderItem:
        """Convert to the pricing core's OrderItem."""
        return PricingOrderItem(id=str(self.id), item=self.to_line_item())
