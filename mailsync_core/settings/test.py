"""Test-specific settings configuration."""

from .base import *

SECRET_KEY = "test-secret-key-not-for-production"  # nosec B105

# Use in-memory SQLite for testing speed. Most tests use "default" as the
# workspace store alias; "workspace_test" is a separate store.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
    "workspace_test": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
}

# Use in-memory cache so the sync lock works without Redis
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    },
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

MESSAGING_GMAIL_CLIENT_ID = "test-client-id"
MESSAGING_GMAIL_CLIENT_SECRET = "test-client-secret"  # nosec B105

# Log to console only during tests
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {
            "level": "ERROR",
            "class": "logging.StreamHandler",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "ERROR",
            "propagate": True,
        },
    },
}
