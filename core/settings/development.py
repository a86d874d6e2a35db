"""
Development settings for vinyl_backoffice project.

Connection details come from ``core.config`` (``DATABASE_URL`` or ``DB_*``,
``REDIS_URL``); the VIES answer cache falls back to local memory when no
Redis URL is configured.
"""

import os

import dj_database_url

from .base import *

SECRET_KEY = APP_SETTINGS.secret_key.get_secret_value()

DEBUG = True

ALLOWED_HOSTS = APP_SETTINGS.allowed_hosts

DATABASES = {"default": dj_database_url.parse(APP_SETTINGS.database.connection_url)}

if os.environ.get("REDIS_URL"):
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": APP_SETTINGS.redis.url,
        }
    }
else:
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

# Back-office front end runs on its own dev server
CORS_ALLOW_ALL_ORIGINS = True

INSTALLED_APPS = [*INSTALLED_APPS, "debug_toolbar"]
MIDDLEWARE = ["debug_toolbar.middleware.DebugToolbarMiddleware", *MIDDLEWARE]
INTERNAL_IPS = ["127.0.0.1"]

# Browsable API for trying quotes and order edits by hand
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = [
    *REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"],
    "rest_framework.renderers.BrowsableAPIRenderer",
]
REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"] = [
    *REST_FRAMEWORK["DEFAULT_AUTHENTICATION_CLASSES"],
    "rest_framework.authentication.BasicAuthentication",
]
