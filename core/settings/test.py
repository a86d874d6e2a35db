"""
Test settings for vinyl_backoffice project.

In-memory SQLite with tables created from the models, and a dummy cache so
VIES answers never leak between tests.
"""

from .base import *

SECRET_KEY = "test-secret-key-not-for-production"  # noqa: S105

DEBUG = False

ALLOWED_HOSTS = ["testserver"]

DATABASES = {"default": {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}}

CACHES = {"default": {"BACKEND": "django.core.cache.backends.dummy.DummyCache"}}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
