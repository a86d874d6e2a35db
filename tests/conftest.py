"""
Pytest configuration and fixtures for the test suite.

This module contains shared fixtures used across all tests.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from django.contrib.auth import get_user_model
from django.test import Client
from rest_framework.test import APIClient

from apps.orders.models import Customer
from apps.orders.models import ShippingRate as ShippingRateModel
from apps.orders.models import ShippingZone as ShippingZoneModel
from core.config import PricingSettings
from services.pricing import (
    LineItem,
    OrderPricingEngine,
    RateType,
    ShippingRate,
    ShippingZone,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractUser


@pytest.fixture()
def test_client() -> Client:
    """Return a Django test client."""
    return Client()


@pytest.fixture()
def user(db: None) -> AbstractUser:
    """Create a back-office staff user."""
    return get_user_model().objects.create_user(
        username="operator",
        email="operator@example.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture()
def authenticated_client(test_client: Client, user: AbstractUser) -> Client:
    """Return an authenticated Django test client."""
    test_client.force_login(user)
    return test_client


@pytest.fixture()
def api_client(user: AbstractUser) -> APIClient:
    """Return a DRF client authenticated as the staff user."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def pricing_settings() -> PricingSettings:
    """French seller, 20% VAT, 100 EUR Pro minimum."""
    return PricingSettings(
        seller_country="FR",
        standard_vat_rate_percent=Decimal("20"),
        default_currency="EUR",
        supported_currencies=["EUR", "USD"],
        minimum_pro_order_amount=Decimal("100"),
    )


@pytest.fixture()
def engine(pricing_settings: PricingSettings) -> OrderPricingEngine:
    """Return a pricing engine with the test settings."""
    return OrderPricingEngine(pricing_settings)


@pytest.fixture()
def france_zone() -> ShippingZone:
    """Flat 6.50, free from 50."""
    return ShippingZone(
        id="fr",
        name="France",
        countries=("FR",),
        rate=ShippingRate(
            rate_type=RateType.FLAT,
            base_price=Decimal("6.50"),
            free_above=Decimal("50"),
        ),
    )


@pytest.fixture()
def eu_zone() -> ShippingZone:
    """9.90 plus 2.00 per kg."""
    return ShippingZone(
        id="eu",
        name="Union européenne",
        countries=("DE", "BE"),
        rate=ShippingRate(
            rate_type=RateType.PER_WEIGHT,
            base_price=Decimal("9.90"),
            per_kg_price=Decimal("2.00"),
        ),
    )


@pytest.fixture()
def world_zone() -> ShippingZone:
    """Fallback zone: 5 + 2 per kg + 1 per extra item."""
    return ShippingZone(
        id="world",
        name="Reste du monde",
        countries=("*",),
        rate=ShippingRate(
            rate_type=RateType.COMBINED,
            base_price=Decimal("5"),
            per_kg_price=Decimal("2"),
            per_item_price=Decimal("1"),
        ),
    )


@pytest.fixture()
def zones(
    france_zone: ShippingZone,
    eu_zone: ShippingZone,
    world_zone: ShippingZone,
) -> list[ShippingZone]:
    """France, EU and rest of world, in that order."""
    return [france_zone, eu_zone, world_zone]


@pytest.fixture()
def record() -> LineItem:
    """A single 0.3 kg record at 24.90."""
    return LineItem(
        title="Kind of Blue - LP",
        unit_price=Decimal("24.90"),
        quantity=1,
        product_id="p-1",
        weight_kg=Decimal("0.3"),
    )


@pytest.fixture()
def db_zones(db: None) -> list[ShippingZoneModel]:
    """Persist France, EU and rest of world zones with their rates."""
    france = ShippingZoneModel.objects.create(name="France", countries=["FR"], position=0)
    ShippingRateModel.objects.create(
        zone=france,
        rate_type=RateType.FLAT.value,
        base_price=Decimal("6.50"),
        free_above=Decimal("50"),
    )
    eu = ShippingZoneModel.objects.create(name="Union européenne", countries=["DE", "BE"], position=1)
    ShippingRateModel.objects.create(
        zone=eu,
        rate_type=RateType.PER_WEIGHT.value,
        base_price=Decimal("9.90"),
        per_kg_price=Decimal("2.00"),
    )
    world = ShippingZoneModel.objects.create(name="Reste du monde", countries=["*"], position=2)
    ShippingRateModel.objects.create(
        zone=world,
        rate_type=RateType.COMBINED.value,
        base_price=Decimal("5"),
        per_kg_price=Decimal("2"),
        per_item_price=Decimal("1"),
    )
    return [france, eu, world]


@pytest.fixture()
def individual_customer(db: None) -> Customer:
    """A French individual."""
    return Customer.objects.create(name="Jeanne Martin", email="jeanne@example.com", country="FR")


@pytest.fixture()
def pro_customer(db: None) -> Customer:
    """A German record shop with a 10% discount and a VAT number."""
    return Customer.objects.create(
        name="Plattenladen GmbH",
        email="einkauf@plattenladen.de",
        customer_type=Customer.Type.PROFESSIONNEL,
        country="DE",
        vat_number="DE123456789",
        discount_rate=Decimal("0.10"),
        payment_terms_days=30,
    )
