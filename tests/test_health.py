"""Tests for health check endpoint."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.test import Client

from apps.orders.models import ShippingRate, ShippingZone


@pytest.mark.django_db
class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, test_client: Client, db_zones: list[ShippingZone]) -> None:
        """Health check endpoint should return 200 when healthy."""
        response = test_client.get("/health/")

        assert response.status_code == 200
        assert response["Content-Type"] == "application/json"

    def test_health_check_contains_checks(self, test_client: Client, db_zones: list[ShippingZone]) -> None:
        """Health check response should report database and zones."""
        data = test_client.get("/health/").json()

        assert data["status"] == "healthy"
        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["shipping_zones"]["status"] == "healthy"

    def test_health_check_without_fallback_zone(self, test_client: Client, db_zones: list[ShippingZone]) -> None:
        """A missing rest-of-world zone degrades the service."""
        ShippingZone.objects.filter(name="Reste du monde").update(is_active=False)

        response = test_client.get("/health/")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"]["shipping_zones"] == {
            "status": "unhealthy",
            "error": "No fallback shipping zone configured",
        }

    def test_health_check_with_two_fallback_zones(self, test_client: Client, db_zones: list[ShippingZone]) -> None:
        """Two rest-of-world zones are an invalid configuration."""
        extra = ShippingZone.objects.create(name="Monde bis", countries=["*"], position=3)
        ShippingRate.objects.create(zone=extra, base_price=Decimal("10"))

        response = test_client.get("/health/")

        assert response.status_code == 503
        assert "invalid_zone_configuration" in response.json()["checks"]["shipping_zones"]["error"]

    def test_health_check_with_no_zones(self, test_client: Client) -> None:
        """An empty zone configuration degrades the service."""
        response = test_client.get("/health/")

        assert response.status_code == 503

    def test_health_check_returns_503_when_database_unhealthy(self, test_client: Client) -> None:
        """Health check should return 503 when database is unhealthy."""
        with patch("core.health.connection") as mock_connection:
            mock_connection.cursor.side_effect = Exception("Database error")
            response = test_client.get("/health/")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"]["database"]["status"] == "unhealthy"
        assert "Database error" in data["checks"]["database"]["error"]
        assert "shipping_zones" not in data["checks"]
