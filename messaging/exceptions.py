"""
Custom exceptions for the messaging application.

Fatal sync errors derive from one of three families: precondition failures,
not-found errors and upstream (provider) failures.
"""


class MessagingError(Exception):
    """Base exception for all errors in the messaging app."""


class PreconditionFailedError(MessagingError):
    """Raised when account state does not allow a sync to run."""


class InvalidCredentialsError(PreconditionFailedError):
    """Raised when a connected account has no refresh token."""


class NoChannelForAccountError(PreconditionFailedError):
    """Raised when a connected account does not have exactly one message channel."""


class SyncInProgressError(PreconditionFailedError):
    """Raised when another sync already holds the lock for the account."""


class NotFoundError(MessagingError):
    """Base exception for unknown workspaces and accounts."""


class WorkspaceNotFoundError(NotFoundError):
    """Raised when a workspace has no usable data source."""


class AccountNotFoundError(NotFoundError):
    """Raised when a connected account is not found in the workspace store."""


class UpstreamUnavailableError(MessagingError):
    """Raised for transport, HTTP or auth failures talking to the mail provider."""


class ConfigurationError(MessagingError):
    """Raised for invalid or missing configuration."""
