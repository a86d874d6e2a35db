#!/usr/bin/env python
"""
Database setup script.

Creates the back-office tables from the models and seeds a default
shipping-zone configuration (France, EU, rest of world) so checkout works
out of the box.

Usage:
    cd /path/to/vinyl_backoffice
    python scripts/setup_db.py [--reset-zones] [--skip-zones]
"""

import argparse
import os
import sys
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))


def default_zones() -> list[dict]:
    """Zones in matching order; France is listed before the EU zone."""
    from services.pricing.countries import EU_COUNTRY_CODES

    return [
        {
            "name": "France",
            "countries": ["FR"],
            "rate": {"rate_type": "flat", "base_price": Decimal("6.50"), "free_above": Decimal("150")},
        },
        {
            "name": "Union européenne",
            "countries": sorted(EU_COUNTRY_CODES - {"FR"}),
            "rate": {
                "rate_type": "per_weight",
                "base_price": Decimal("9.90"),
                "per_kg_price": Decimal("2.00"),
                "free_above": Decimal("300"),
            },
        },
        {
            "name": "Reste du monde",
            "countries": ["*"],
            "rate": {
                "rate_type": "combined",
                "base_price": Decimal("19.90"),
                "per_kg_price": Decimal("4.00"),
                "per_item_price": Decimal("1.50"),
            },
        },
    ]


def setup_django() -> None:
    """Setup Django and report which database is used."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings.development")

    import django

    from core.config import get_settings

    print(f"Database: {get_settings().database.safe_url}")
    django.setup()


def create_tables() -> None:
    """Create the tables for every installed app."""
    from django.core.management import call_command

    print("\nCreating tables...")
    call_command("migrate", run_syncdb=True, verbosity=1)


def seed_shipping_zones(reset: bool = False) -> None:
    """
    Create the default shipping zones.

    Existing zones are kept unless ``reset`` is set; an operator may have
    reordered or repriced them since the first setup.
    """
    from django.db import transaction

    from apps.orders.models import ShippingRate, ShippingZone

    with transaction.atomic():
        if reset:
            deleted, _ = ShippingZone.objects.all().delete()
            print(f"\nDeleted {deleted} shipping zone rows.")
        elif ShippingZone.objects.exists():
            print("\nShipping zones already configured.")
            return

        print("\nCreating default shipping zones...")
        for position, defaults in enumerate(default_zones()):
            zone = ShippingZone.objects.create(
                name=defaults["name"],
                countries=defaults["countries"],
                position=position,
            )
            ShippingRate.objects.create(zone=zone, **defaults["rate"])
            print(f"  {position}. {zone.name} ({defaults['rate']['rate_type']})")


def create_staff_user(email: str, password: str) -> None:
    """Create a back-office operator account."""
    from django.contrib.auth import get_user_model

    user_model = get_user_model()
    if user_model.objects.filter(email=email).exists():
        print(f"\nUser '{email}' already exists.")
        return

    user_model.objects.create_user(
        username=email.split("@")[0],
        email=email,
        password=password,
        is_staff=True,
    )
    print(f"\nOperator '{email}' created.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and default shipping zones")
    parser.add_argument(
        "--reset-zones",
        action="store_true",
        help="Replace the shipping zones with the defaults (WARNING: loses operator changes)",
    )
    parser.add_argument(
        "--skip-zones",
        action="store_true",
        help="Do not seed the default shipping zones",
    )
    args = parser.parse_args()

    load_dotenv(project_root / ".env")

    setup_django()
    create_tables()

    if not args.skip_zones:
        seed_shipping_zones(reset=args.reset_zones)

    if (email := os.environ.get("ADMIN_EMAIL")) and (password := os.environ.get("ADMIN_PASSWORD")):
        create_staff_user(email=email, password=password)

    print("\nDatabase setup complete!")
