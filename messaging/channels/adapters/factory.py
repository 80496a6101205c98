"""
Factory module for creating the provider adapter of a connected account.
"""

from django.utils.module_loading import import_string

from mailsync_core.utils.logging import ContextLogger

from ...enums import Provider
from ...exceptions import ConfigurationError

logger = ContextLogger(__name__)

ADAPTER_PATHS = {
    Provider.GMAIL: "messaging.channels.adapters.gmail.GmailAdapter",
}


def get_adapter(account, **kwargs):
    """
    Create the inbound adapter matching ``account.provider``.

    Raises:
        ConfigurationError: If the provider has no adapter or it cannot be loaded
    """
    if not account:
        raise ConfigurationError("Account is missing or invalid")

    adapter_path = ADAPTER_PATHS.get(account.provider)
    if adapter_path is None:
        raise ConfigurationError(
            f"No adapter for provider {account.provider!r} of account {account.id}",
        )

    try:
        adapter_class = import_string(adapter_path)
    except ImportError as e:
        logger.error(
            "Failed to load adapter",
            extra_context={"adapter_path": adapter_path, "error": str(e)},
        )
        raise ConfigurationError(f"Failed to load adapter: {e!s}") from e

    logger.debug(
        "Created provider adapter",
        extra_context={"account_id": str(account.id), "adapter_path": adapter_path},
    )
    return adapter_class(account, **kwargs)
