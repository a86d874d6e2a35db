"""Health check endpoint for monitoring."""

from django.db import connection
from django.http import JsonResponse

from apps.orders.services import list_shipping_zones_with_rates
from services.pricing import validate_zones

HEALTHY = {"status": "healthy"}


def health_check(_request: object) -> JsonResponse:
    """
    Report database connectivity and the shipping-zone configuration.

    Without a single "rest of world" zone, checkout fails for every
    destination not listed in a zone, so the service answers 503
    ``degraded`` until an operator fixes the zones.
    """
    checks = {"database": _check_database()}
    if checks["database"] is HEALTHY:
        checks["shipping_zones"] = _check_shipping_zones()

    healthy = all(check is HEALTHY for check in checks.values())
    return JsonResponse(
        {"status": "healthy" if healthy else "degraded", "checks": checks},
        status=200 if healthy else 503,
    )


def _unhealthy(error: object) -> dict[str, str]:
    return {"status": "unhealthy", "error": str(error)}


def _check_database() -> dict[str, str]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as e:
        return _unhealthy(e)
    return HEALTHY


def _check_shipping_zones() -> dict[str, str]:
    zones = list_shipping_zones_with_rates()
    valid = validate_zones(zones)
    if valid.is_failure():
        return _unhealthy(valid.error)
    if not any(zone.is_fallback for zone in zones):
        return _unhealthy("No fallback shipping zone configured")
    return HEALTHY
