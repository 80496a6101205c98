"""Base service module with the account resolution shared by sync services.

``BaseService.resolve_account`` is the only place that turns a workspace id
and a connected account id into a usable store handle and credential bundle.
"""

from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import DatabaseError, connections

from mailsync_core.utils.logging import ContextLogger

from ..enums import Provider
from ..exceptions import (
    AccountNotFoundError,
    InvalidCredentialsError,
    WorkspaceNotFoundError,
)
from ..models import ConnectedAccount, WorkspaceDataSource


@dataclass(frozen=True)
class WorkspaceStore:
    """A workspace's physical store: the database alias and its schema."""

    alias: str
    schema: str


@dataclass(frozen=True)
class ResolvedAccount:
    store: WorkspaceStore
    account: ConnectedAccount

    @property
    def workspace_member_id(self):
        return self.account.workspace_member_id


class BaseService:
    """Base service class with common functionality for messaging services."""

    def __init__(self, request_id=None):
        self.logger = ContextLogger(__name__)
        if request_id:
            self.logger.set_context(request_id=request_id)

    def resolve_store(self, workspace_id) -> WorkspaceStore:
        """Find and open the store of a workspace.

        Raises
        ------
            WorkspaceNotFoundError: If the workspace has no data source, its
                alias is not configured, or the connection cannot be opened

        """
        try:
            data_source = (
                WorkspaceDataSource.objects.filter(workspace_id=workspace_id)
                .order_by("-created_at", "-id")
                .first()
            )
        except (ValidationError, ValueError):
            data_source = None

        if data_source is None:
            self.logger.warning(
                "No data source for workspace",
                extra_context={"workspace_id": str(workspace_id)},
            )
            raise WorkspaceNotFoundError(f"No data source found for workspace {workspace_id}")

        alias = data_source.database_alias
        if alias not in connections.databases:
            raise WorkspaceNotFoundError(
                f"Workspace {workspace_id} points at unknown database alias {alias!r}",
            )

        try:
            connections[alias].ensure_connection()
        except DatabaseError as e:
            self.logger.error(
                f"Workspace store cannot be opened: {e!s}",
                extra_context={"workspace_id": str(workspace_id), "alias": alias},
            )
            raise WorkspaceNotFoundError(
                f"Store for workspace {workspace_id} cannot be opened: {e!s}",
            ) from e

        return WorkspaceStore(alias=alias, schema=data_source.schema)

    def resolve_account(self, workspace_id, connected_account_id) -> ResolvedAccount:
        """Resolve a workspace + connected account pair.

        Raises
        ------
            WorkspaceNotFoundError: See ``resolve_store``
            AccountNotFoundError: If no Gmail account with that id exists
            InvalidCredentialsError: If the account has no refresh token

        """
        store = self.resolve_store(workspace_id)

        try:
            account = (
                ConnectedAccount.objects.using(store.alias)
                .filter(provider=Provider.GMAIL, id=connected_account_id)
                .first()
            )
        except (ValidationError, ValueError):
            account = None

        if account is None:
            self.logger.warning(
                "Connected account not found",
                extra_context={"account_id": str(connected_account_id)},
            )
            raise AccountNotFoundError(
                f"No connected account {connected_account_id} in workspace {workspace_id}",
            )

        if not account.has_refresh_token:
            raise InvalidCredentialsError(
                f"Connected account {connected_account_id} has no refresh token",
            )

        return ResolvedAccount(store=store, account=account)
