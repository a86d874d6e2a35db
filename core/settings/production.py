"""
Production settings for vinyl_backoffice project.

Secrets and hosts must be provided by the environment; structlog renders
JSON (see ``configure_logging`` in the base settings).
"""

import os

import dj_database_url

from .base import *

SECRET_KEY = os.environ["SECRET_KEY"]

DEBUG = False

ALLOWED_HOSTS = APP_SETTINGS.allowed_hosts

DATABASES = {
    "default": dj_database_url.parse(
        APP_SETTINGS.database.connection_url,
        conn_max_age=600,
        conn_health_checks=True,
        ssl_require=True,
    )
}

# VIES answers are shared between workers
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": APP_SETTINGS.redis.url,
        "KEY_PREFIX": "vinyl",
    }
}

CORS_ALLOWED_ORIGINS = [o for o in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if o]
CSRF_TRUSTED_ORIGINS = CORS_ALLOWED_ORIGINS

SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"
SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True

# Admin static files served by WhiteNoise, right after SecurityMiddleware
MIDDLEWARE = [MIDDLEWARE[0], "whitenoise.middleware.WhiteNoiseMiddleware", *MIDDLEWARE[1:]]
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}
