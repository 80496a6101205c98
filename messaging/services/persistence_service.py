"""
Persistence service for the sync engine.

Writes new threads, then new messages with their sender recipient row, in
foreign-key order: channel -> thread -> message -> recipient.
"""

import uuid
from dataclasses import dataclass, field

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import OuterRef, Subquery

from ..enums import MessageDirection, RecipientRole, ThreadVisibility
from ..exceptions import NoChannelForAccountError
from ..models import Message, MessageRecipient, MessageThread, Person
from .base_service import BaseService


@dataclass
class MessageSaveResult:
    saved: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)


class PersistenceService(BaseService):
    """Inserts synced records into one workspace store."""

    def __init__(self, store, request_id=None):
        super().__init__(request_id=request_id)
        self.store = store

    @property
    def alias(self):
        return self.store.alias

    def save_threads(self, threads, channel) -> int:
        """Insert one thread row per remote thread; existing rows are left alone.

        Conflicts on (channel, external id) are ignored so an overlapping run
        cannot duplicate threads.

        Returns:
            Number of thread rows actually created
        """
        if channel is None:
            raise NoChannelForAccountError("No message channel found for this connected account")
        if not threads:
            return 0

        external_ids = [thread.external_id for thread in threads]
        channel_threads = MessageThread.objects.using(self.alias).filter(
            message_channel=channel, external_id__in=external_ids,
        )
        existing = channel_threads.count()

        MessageThread.objects.using(self.alias).bulk_create(
            [
                MessageThread(
                    external_id=thread.external_id,
                    subject=thread.snippet,
                    message_channel=channel,
                    visibility=ThreadVisibility.DEFAULT,
                )
                for thread in threads
            ],
            ignore_conflicts=True,
        )

        created = channel_threads.count() - existing
        self.logger.info(
            f"Saved {created} message threads",
            extra_context={"channel_id": str(channel.id), "submitted": len(threads)},
        )
        return created

    def find_person_id(self, handle):
        """Return the id of the first Person with this email, or None."""
        if not handle:
            return None
        return (
            Person.objects.using(self.alias)
            .filter(email__iexact=handle)
            .order_by("created_at")
            .values_list("id", flat=True)
            .first()
        )

    def save_message(self, message, thread_id, workspace_member_id) -> Message:
        """Insert a message and its ``from`` recipient in one transaction.

        ``thread_id`` may be None, in which case the message is stored as an
        orphan and keeps its thread external id for a later relink.
        """
        person_id = self.find_person_id(message.from_handle)

        with transaction.atomic(using=self.alias):
            record = Message.objects.using(self.alias).create(
                id=uuid.uuid4(),
                external_id=message.external_id,
                header_message_id=message.header_message_id,
                subject=message.subject,
                date=message.date,
                message_thread_id=thread_id,
                message_thread_external_id=message.thread_external_id,
                direction=MessageDirection.INCOMING,
                body=message.text,
            )
            MessageRecipient.objects.using(self.alias).create(
                message=record,
                role=RecipientRole.FROM,
                handle=message.from_handle,
                display_name=message.from_display_name,
                person_id=person_id,
                workspace_member_id=workspace_member_id,
            )
        return record

    def _is_stored(self, external_id):
        return Message.objects.using(self.alias).filter(external_id=external_id).exists()

    def save_messages(self, messages, channel, workspace_member_id) -> MessageSaveResult:
        """Save each message in its own transaction.

        A failing message is rolled back, logged and recorded; the remaining
        messages are still attempted. An integrity error on a message that is
        already in the store means another run saved it first and counts as
        skipped; any other integrity error is a failure.
        """
        result = MessageSaveResult()
        if not messages:
            return result

        thread_ids = dict(
            MessageThread.objects.using(self.alias)
            .filter(
                message_channel=channel,
                external_id__in={message.thread_external_id for message in messages},
            )
            .values_list("external_id", "id"),
        )

        for message in messages:
            thread_id = thread_ids.get(message.thread_external_id)
            with self.logger.context(message_external_id=message.external_id):
                try:
                    self.save_message(message, thread_id, workspace_member_id)
                except IntegrityError:
                    if self._is_stored(message.external_id):
                        self.logger.warning("Message already stored, skipping")
                        result.skipped.append(message.external_id)
                    else:
                        self.logger.exception("Failed to save message")
                        result.failed.append(message.external_id)
                    continue
                except (DatabaseError, ValueError):
                    self.logger.exception("Failed to save message")
                    result.failed.append(message.external_id)
                    continue

                result.saved.append(message.external_id)
                if thread_id is None:
                    self.logger.warning(
                        "Saved message without thread",
                        extra_context={"thread_external_id": message.thread_external_id},
                    )
                    result.orphans.append(message.external_id)

        self.logger.info(
            f"Saved {len(result.saved)} of {len(messages)} messages",
            extra_context={
                "skipped": len(result.skipped),
                "failed": len(result.failed),
                "orphans": len(result.orphans),
            },
        )
        return result

    def relink_orphan_messages(self, channel) -> int:
        """Attach orphan messages to their thread once it exists in ``channel``.

        Returns:
            Number of messages relinked
        """
        channel_threads = MessageThread.objects.using(self.alias).filter(
            message_channel=channel,
        )
        relinked = (
            Message.objects.using(self.alias)
            .filter(
                message_thread__isnull=True,
                message_thread_external_id__in=channel_threads.values("external_id"),
            )
            .update(
                message_thread=Subquery(
                    channel_threads.filter(
                        external_id=OuterRef("message_thread_external_id"),
                    ).values("id")[:1],
                ),
            )
        )
        if relinked:
            self.logger.info(f"Relinked {relinked} orphan messages")
        return relinked
