"""Base settings shared by every environment of the mailbox sync project."""

from pathlib import Path

from decouple import Csv, config

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = config("SECRET_KEY", default="dev-only-insecure-secret-key")

DEBUG = False

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "messaging",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "mailsync_core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_TZ = True

STATIC_URL = "static/"

# Workspace stores are extra database aliases. Each alias pins its tenant
# schema through the PostgreSQL search_path.
WORKSPACE_DATABASE_ALIASES = config("WORKSPACE_DATABASE_ALIASES", default="", cast=Csv())


def workspace_database(schema, **overrides):
    """Build a DATABASES entry for a workspace store living in ``schema``."""
    database = {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config("DB_NAME", default="mailsync"),
        "USER": config("DB_USER", default="mailsync"),
        "PASSWORD": config("DB_PASSWORD", default=""),
        "HOST": config("DB_HOST", default="localhost"),
        "PORT": config("DB_PORT", default=5432, cast=int),
        "OPTIONS": {"options": f"-c search_path={schema},public"},
    }
    database.update(overrides)
    return database


# Celery
CELERY_BROKER_URL = config("CELERY_BROKER_URL", default="redis://localhost:6379/0")
CELERY_RESULT_BACKEND = config(
    "CELERY_RESULT_BACKEND", default="redis://localhost:6379/0",
)

# Cache backs the per-account sync lock, so it must be shared by all workers
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": config("CACHE_URL", default="redis://localhost:6379/1"),
    },
}

# Messaging app settings (overridable with MESSAGING_* environment variables)
MESSAGING_GMAIL_CLIENT_ID = config("GMAIL_CLIENT_ID", default=None)
MESSAGING_GMAIL_CLIENT_SECRET = config("GMAIL_CLIENT_SECRET", default=None)
MESSAGING_ADMIN_DATABASE = config("ADMIN_WORKSPACE_DATABASE", default="default")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "context": {
            "()": "mailsync_core.utils.logging.ContextFormatter",
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "context",
        },
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "messaging": {
            "handlers": ["console"],
            "level": config("MESSAGING_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
    },
}
