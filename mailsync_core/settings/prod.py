from .base import *

# Production-specific settings
DEBUG = config("DEBUG", default=False, cast=bool)

SECRET_KEY = config("SECRET_KEY")

ALLOWED_HOSTS = config("ALLOWED_HOSTS", cast=Csv())

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": config("DB_NAME"),
        "USER": config("DB_USER"),
        "PASSWORD": config("DB_PASSWORD"),
        "HOST": config("DB_HOST"),
        "PORT": config("DB_PORT", default=5432, cast=int),
    },
}

# One alias per provisioned workspace store; the alias doubles as schema name
for alias in WORKSPACE_DATABASE_ALIASES:
    DATABASES[alias] = workspace_database(alias)

# Field-level encryption for provider tokens
MESSAGING_ENCRYPTION_KEY = config("FIELD_ENCRYPTION_KEY")
MESSAGING_ENCRYPTION_SALT = config("FIELD_ENCRYPTION_SALT")
