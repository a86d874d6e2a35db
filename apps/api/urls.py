"""URL configuration for the API application."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.api.views import OrderViewSet, QuoteView, ShippingZoneListView

app_name = "api"

router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")

urlpatterns = [
    path("", include(router.urls)),
    path("pricing/quote/", QuoteView.as_view(), name="pricing-quote"),
    path("shipping-zones/", ShippingZoneListView.as_view(), name="shipping-zones"),
]
