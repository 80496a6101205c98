"""
Configuration settings for the messaging app.

Values are looked up in ``MESSAGING_*`` environment variables first, then in
Django settings, then in ``DEFAULT_CONFIG``.
"""

import os

from django.conf import settings

DEFAULT_CONFIG = {
    # Sync settings
    "MAX_RESULTS": 500,  # Threads listed per sync run
    "BATCH_SIZE": 50,  # Requests per Gmail batch call (hard limit is 100)
    "SYNC_LOCK_TIMEOUT": 60 * 60,  # Per-account lock expiry in seconds
    # Task retry settings
    "MAX_RETRIES": 3,
    "RETRY_DELAY": 300,  # Default: 5 minutes
    # Gmail OAuth client
    "GMAIL_CLIENT_ID": None,
    "GMAIL_CLIENT_SECRET": None,
    "GMAIL_TOKEN_URI": "https://oauth2.googleapis.com/token",
    # Security settings
    "ENCRYPTION_ENABLED": True,
    "ENCRYPTION_KEY": None,  # Falls back to SECRET_KEY
    "ENCRYPTION_SALT": None,  # Falls back to a SECRET_KEY digest
    # Admin
    "ADMIN_DATABASE": "default",  # Workspace store alias served by the admin
}


def get_config(key, default=None):
    """
    Get a configuration value from environment variables or settings with fallback.

    Args:
        key: The configuration key to look up
        default: Default value if not found

    Returns:
        The configuration value
    """
    if default is None:
        default = DEFAULT_CONFIG.get(key)

    env_key = f"MESSAGING_{key}"
    if env_key in os.environ:
        value = os.environ[env_key]

        # Convert to the type of the default where there is one
        if isinstance(default, bool):
            return value.lower() in ("true", "yes", "1")
        elif isinstance(default, int):
            try:
                return int(value)
            except (ValueError, TypeError):
                return default
        return value

    if hasattr(settings, env_key):
        return getattr(settings, env_key)

    return default
