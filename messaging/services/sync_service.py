"""
Sync service for the messaging app.

Reconciles a provider mailbox with the workspace store:

1. list remote threads (capped by ``max_results``)
2. snapshot the external ids the store already holds
3. save threads the store does not know
4. list message ids for every listed thread (ids only)
5. fetch bodies for the message ids the store does not know
6. save those messages, one transaction each

Running it twice with no new remote data writes nothing the second time.
"""

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field

from django.utils import timezone

from mailsync_core.utils.logging import ContextLogger, with_request_id

from ..channels.adapters.factory import get_adapter
from ..config import get_config
from .base_service import BaseService
from .ledger_service import LedgerService
from .locks import AccountSyncLock
from .persistence_service import PersistenceService

logger = ContextLogger(__name__)


@dataclass
class SyncReport:
    threads_listed: int = 0
    threads_saved: int = 0
    messages_listed: int = 0
    messages_saved: int = 0
    messages_skipped: int = 0
    orphans_relinked: int = 0
    failed_message_ids: list[str] = field(default_factory=list)
    orphan_message_ids: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def as_dict(self):
        return asdict(self)


def filter_new_threads(remote_threads, known_thread_ids) -> list:
    """Remote threads whose external id is not known, in remote order, deduplicated."""
    seen = set(known_thread_ids)
    new_threads = []
    for thread in remote_threads:
        if thread.external_id and thread.external_id not in seen:
            seen.add(thread.external_id)
            new_threads.append(thread)
    return new_threads


def filter_new_message_ids(remote_message_ids: Iterable[str], known_message_ids) -> list[str]:
    """Message ids not known locally, in remote order, deduplicated."""
    seen = set(known_message_ids)
    new_ids = []
    for message_id in remote_message_ids:
        if message_id and message_id not in seen:
            seen.add(message_id)
            new_ids.append(message_id)
    return new_ids


class MessageSyncService(BaseService):
    """Incremental mailbox sync for one connected account per call."""

    def __init__(self, request_id=None, adapter_factory=get_adapter):
        super().__init__(request_id=request_id)
        self.request_id = request_id
        self.adapter_factory = adapter_factory

    def sync_account(self, workspace_id, connected_account_id, max_results=None) -> SyncReport:
        """
        Sync new threads and messages of a connected account.

        Args:
            workspace_id: Workspace owning the account
            connected_account_id: ConnectedAccount id within the workspace store
            max_results: Cap on listed threads, defaults to MAX_RESULTS

        Returns:
            SyncReport with counts for this run

        Raises:
            NotFoundError: Unknown workspace, store or account
            PreconditionFailedError: Missing credentials or channel, or a
                sync already running for the account
            UpstreamUnavailableError: Provider failure
        """
        if max_results is None:
            max_results = get_config("MAX_RESULTS")

        with logger.context(
            request_id=self.request_id,
            workspace_id=str(workspace_id),
            account_id=str(connected_account_id),
            action="sync_account",
        ):
            resolved = self.resolve_account(workspace_id, connected_account_id)

            with AccountSyncLock(workspace_id, connected_account_id):
                return self._sync(resolved, max_results)

    def _sync(self, resolved, max_results) -> SyncReport:
        started_at = timezone.now()
        report = SyncReport()
        store = resolved.store
        account = resolved.account

        logger.info("Starting mailbox sync", extra_context={"max_results": max_results})
        adapter = self.adapter_factory(account)

        remote_threads = adapter.list_threads(max_results)
        report.threads_listed = len(remote_threads)
        if not remote_threads:
            logger.info("No remote threads, nothing to sync")
            return self._finish(report, started_at)

        known = LedgerService(request_id=self.request_id).load_known_state(store, account.id)
        persistence = PersistenceService(store, request_id=self.request_id)

        new_threads = filter_new_threads(remote_threads, known.known_thread_ids)
        report.threads_saved = persistence.save_threads(new_threads, known.channel)

        # Known threads may have gained messages, so list ids for all of them
        message_ids_by_thread = adapter.list_message_ids_for_threads(
            [thread.external_id for thread in remote_threads],
        )
        remote_message_ids = [
            message_id
            for message_ids in message_ids_by_thread.values()
            for message_id in message_ids
        ]
        report.messages_listed = len(remote_message_ids)

        new_message_ids = filter_new_message_ids(remote_message_ids, known.known_message_ids)
        if new_message_ids:
            messages = adapter.fetch_messages(new_message_ids)
            result = persistence.save_messages(
                messages, known.channel, resolved.workspace_member_id,
            )
            report.messages_saved = len(result.saved)
            report.messages_skipped = len(result.skipped)
            report.failed_message_ids = result.failed
            report.orphan_message_ids = result.orphans

        report.orphans_relinked = persistence.relink_orphan_messages(known.channel)
        return self._finish(report, started_at)

    def _finish(self, report, started_at) -> SyncReport:
        report.duration_seconds = (timezone.now() - started_at).total_seconds()
        logger.info("Mailbox sync completed", extra_context=report.as_dict())
        return report

    def relink_orphans(self, workspace_id, connected_account_id) -> int:
        """Relink orphan messages of an account without contacting the provider."""
        resolved = self.resolve_account(workspace_id, connected_account_id)
        channel = LedgerService(request_id=self.request_id).get_channel(
            resolved.store, resolved.account.id,
        )
        with AccountSyncLock(workspace_id, connected_account_id):
            return PersistenceService(
                resolved.store, request_id=self.request_id,
            ).relink_orphan_messages(channel)


# Convenience functions that use the service
@with_request_id
def sync_account(workspace_id, connected_account_id, max_results=None, _request_id=None):
    """Sync one connected account. See ``MessageSyncService.sync_account``."""
    service = MessageSyncService(request_id=_request_id)
    return service.sync_account(workspace_id, connected_account_id, max_results)


@with_request_id
def relink_orphans(workspace_id, connected_account_id, _request_id=None):
    service = MessageSyncService(request_id=_request_id)
    return service.relink_orphans(workspace_id, connected_account_id)
