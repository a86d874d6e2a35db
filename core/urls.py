"""
URL configuration for vinyl_backoffice project.

The admin manages customers and shipping zones; pricing and order entry go
through the versioned REST API.
"""

from django.conf import settings
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from core.health import health_check

urlpatterns = [
    path("admin/", admin.site.urls),
    # OpenAPI schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger"),
    path("api/v1/", include("apps.api.urls", namespace="api")),
    path("health/", health_check, name="health"),
]

if "debug_toolbar" in settings.INSTALLED_APPS:
    urlpatterns = [path("__debug__/", include("debug_toolbar.urls")), *urlpatterns]
