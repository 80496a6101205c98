"""Local ledger: what the workspace store already holds for an account."""

from dataclasses import dataclass

from ..exceptions import NoChannelForAccountError
from ..models import Message, MessageChannel, MessageThread
from .base_service import BaseService, WorkspaceStore


@dataclass(frozen=True)
class KnownState:
    channel: MessageChannel
    known_thread_ids: frozenset[str]
    known_message_ids: frozenset[str]


class LedgerService(BaseService):
    """Read-only queries used as the dedup filter of a sync run."""

    def get_channel(self, store: WorkspaceStore, connected_account_id) -> MessageChannel:
        """Return the single message channel of an account.

        Raises
        ------
            NoChannelForAccountError: If the account has no channel, or more than one

        """
        channels = list(
            MessageChannel.objects.using(store.alias)
            .filter(connected_account_id=connected_account_id)
            .order_by("created_at")[:2],
        )
        if not channels:
            raise NoChannelForAccountError(
                f"No message channel found for connected account {connected_account_id}",
            )
        if len(channels) > 1:
            raise NoChannelForAccountError(
                f"Connected account {connected_account_id} has more than one message channel",
            )
        return channels[0]

    def load_known_state(self, store: WorkspaceStore, connected_account_id) -> KnownState:
        """Snapshot the external ids already stored for the account's channel."""
        channel = self.get_channel(store, connected_account_id)

        known_thread_ids = frozenset(
            MessageThread.objects.using(store.alias)
            .filter(message_channel=channel)
            .values_list("external_id", flat=True),
        )
        known_message_ids = frozenset(
            Message.objects.using(store.alias)
            .filter(message_thread__message_channel=channel)
            .values_list("external_id", flat=True),
        )

        self.logger.debug(
            "Loaded known state",
            extra_context={
                "channel_id": str(channel.id),
                "known_threads": len(known_thread_ids),
                "known_messages": len(known_message_ids),
            },
        )
        return KnownState(
            channel=channel,
            known_thread_ids=known_thread_ids,
            known_message_ids=known_message_ids,
        )
