from .base import *

# Development-specific settings
DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# Use local sqlite databases for development; "workspace_dev" stands in for a
# provisioned workspace store.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    },
    "workspace_dev": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "workspace_dev.sqlite3",
    },
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    },
}

MESSAGING_ADMIN_DATABASE = "workspace_dev"
