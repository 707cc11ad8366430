"""Settings for the pytest suite.

Provides a throwaway secret, a local-memory cache, a file-backed SQLite
database and no throttling so the suite runs without Redis, PostgreSQL or a
populated environment.
"""

import os
import tempfile

import structlog

os.environ.setdefault("SECRET_KEY", "test-only-secret-key-not-for-production")

from config.settings import *  # noqa: E402,F401,F403
from config.settings import REST_FRAMEWORK  # noqa: E402

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "order-service-tests",
    }
}

# File-backed so threaded tests share one database.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.path.join(tempfile.gettempdir(), "storefront-orders.sqlite3"),
        "OPTIONS": {"timeout": 20},
        "TEST": {
            "NAME": os.path.join(
                tempfile.gettempdir(), "test-storefront-orders.sqlite3"
            ),
        },
    }
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": [],
}

# Loggers must pick up structlog.testing.capture_logs in every test.
structlog.configure(cache_logger_on_first_use=False)

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"
    },
}
