"""Tests for writing synced threads and messages to a workspace store."""

from datetime import datetime, timezone

import pytest
from django.db import DatabaseError, IntegrityError
from django.db.models import QuerySet

from messaging.channels.adapters.base import FullMessage, RemoteThread
from messaging.enums import MessageDirection, RecipientRole, ThreadVisibility
from messaging.exceptions import NoChannelForAccountError
from messaging.models import Message, MessageRecipient, MessageThread
from messaging.services.persistence_service import PersistenceService

from .factories import MessageChannelFactory, MessageFactory, MessageThreadFactory, PersonFactory


def make_message(external_id="m-1", thread_external_id="t-1", **overrides):
    values = {
        "external_id": external_id,
        "thread_external_id": thread_external_id,
        "header_message_id": f"<{external_id}@mail.example.com>",
        "subject": "Quarterly numbers",
        "from_handle": "alice@example.com",
        "from_display_name": "Alice Doe",
        "internal_date": "1700000000000",
        "text": "See attached.",
    }
    values.update(overrides)
    return FullMessage(**values)


@pytest.fixture
def persistence(store):
    return PersistenceService(store)


@pytest.mark.django_db
class TestSaveThreads:
    def test_creates_threads_with_snippet_as_subject(self, persistence, message_channel):
        created = persistence.save_threads(
            [RemoteThread("t-1", "Hello"), RemoteThread("t-2", "")], message_channel,
        )

        assert created == 2
        thread = MessageThread.objects.get(external_id="t-1")
        assert thread.subject == "Hello"
        assert thread.visibility == ThreadVisibility.DEFAULT
        assert thread.message_channel == message_channel

    def test_existing_threads_are_left_alone(self, persistence, message_channel):
        MessageThreadFactory(message_channel=message_channel, external_id="t-1", subject="Old")

        created = persistence.save_threads(
            [RemoteThread("t-1", "New"), RemoteThread("t-2", "Other")], message_channel,
        )

        assert created == 1
        assert MessageThread.objects.get(external_id="t-1").subject == "Old"
        assert MessageThread.objects.filter(message_channel=message_channel).count() == 2

    def test_same_external_id_in_another_channel_is_allowed(self, persistence, message_channel):
        MessageThreadFactory(message_channel=MessageChannelFactory(), external_id="t-1")

        assert persistence.save_threads([RemoteThread("t-1")], message_channel) == 1

    def test_empty_list_writes_nothing(self, persistence, message_channel):
        assert persistence.save_threads([], message_channel) == 0
        assert MessageThread.objects.count() == 0

    def test_missing_channel_is_rejected(self, persistence):
        with pytest.raises(NoChannelForAccountError):
            persistence.save_threads([RemoteThread("t-1")], None)


@pytest.mark.django_db
class TestSaveMessages:
    @pytest.fixture
    def thread(self, message_channel):
        return MessageThreadFactory(message_channel=message_channel, external_id="t-1")

    def test_saves_message_and_sender(self, persistence, message_channel, thread):
        member_id = message_channel.connected_account.workspace_member_id

        result = persistence.save_messages([make_message()], message_channel, member_id)

        assert result.saved == ["m-1"]
        assert result.failed == []
        message = Message.objects.get(external_id="m-1")
        assert message.message_thread == thread
        assert message.header_message_id == "<m-1@mail.example.com>"
        assert message.subject == "Quarterly numbers"
        assert message.body == "See attached."
        assert message.direction == MessageDirection.INCOMING
        assert message.date == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

        recipient = message.recipients.get()
        assert recipient.role == RecipientRole.FROM
        assert recipient.handle == "alice@example.com"
        assert recipient.display_name == "Alice Doe"
        assert recipient.person_id is None
        assert recipient.workspace_member_id == member_id

    def test_sender_is_linked_to_matching_person(self, persistence, message_channel, thread):
        person = PersonFactory(email="Alice@Example.com")

        persistence.save_messages([make_message()], message_channel, None)

        recipient = MessageRecipient.objects.get(message__external_id="m-1")
        assert recipient.person_id == person.id

    def test_bad_message_does_not_stop_the_rest(self, persistence, message_channel, thread):
        messages = [
            make_message("m-1"),
            make_message("m-2", internal_date="yesterday"),
            make_message("m-3"),
        ]

        result = persistence.save_messages(messages, message_channel, None)

        assert result.saved == ["m-1", "m-3"]
        assert result.failed == ["m-2"]
        assert set(Message.objects.values_list("external_id", flat=True)) == {"m-1", "m-3"}
        # The failed message left no recipient behind
        assert MessageRecipient.objects.count() == 2

    def test_out_of_range_date_is_recorded_as_failed(self, persistence, message_channel, thread):
        messages = [
            make_message("m-1"),
            make_message("m-2", internal_date="253402300800000"),
            make_message("m-3"),
        ]

        result = persistence.save_messages(messages, message_channel, None)

        assert result.saved == ["m-1", "m-3"]
        assert result.failed == ["m-2"]

    def test_failed_recipient_rolls_back_its_message(
        self, persistence, message_channel, thread, monkeypatch,
    ):
        original_create = QuerySet.create

        def create(queryset, **kwargs):
            if queryset.model is MessageRecipient and kwargs.get("handle") == "bad@example.com":
                raise DatabaseError("recipient insert failed")
            return original_create(queryset, **kwargs)

        monkeypatch.setattr(QuerySet, "create", create)
        messages = [
            make_message("m-1"),
            make_message("m-2", from_handle="bad@example.com"),
            make_message("m-3"),
        ]

        result = persistence.save_messages(messages, message_channel, None)

        assert result.saved == ["m-1", "m-3"]
        assert result.failed == ["m-2"]
        assert not Message.objects.filter(external_id="m-2").exists()
        assert MessageRecipient.objects.count() == 2

    def test_integrity_error_on_unstored_message_is_a_failure(
        self, persistence, message_channel, thread, monkeypatch,
    ):
        def save_message(message, thread_id, workspace_member_id):
            raise IntegrityError("FOREIGN KEY constraint failed")

        monkeypatch.setattr(persistence, "save_message", save_message)

        result = persistence.save_messages([make_message("m-1")], message_channel, None)

        assert result.failed == ["m-1"]
        assert result.skipped == []

    def test_already_stored_message_is_skipped(self, persistence, message_channel, thread):
        MessageFactory(message_thread=thread, external_id="m-1")

        result = persistence.save_messages(
            [make_message("m-1"), make_message("m-2")], message_channel, None,
        )

        assert result.skipped == ["m-1"]
        assert result.saved == ["m-2"]
        assert Message.objects.filter(external_id="m-1").count() == 1

    def test_message_without_thread_is_kept_as_orphan(self, persistence, message_channel):
        result = persistence.save_messages(
            [make_message(thread_external_id="t-late")], message_channel, None,
        )

        assert result.saved == ["m-1"]
        assert result.orphans == ["m-1"]
        message = Message.objects.get(external_id="m-1")
        assert message.is_orphan
        assert message.message_thread_external_id == "t-late"

    def test_thread_lookup_is_scoped_to_channel(self, persistence, message_channel):
        MessageThreadFactory(message_channel=MessageChannelFactory(), external_id="t-1")

        result = persistence.save_messages([make_message()], message_channel, None)

        assert result.orphans == ["m-1"]

    def test_orphans_are_relinked_once_thread_exists(self, persistence, message_channel):
        persistence.save_messages(
            [make_message("m-1", "t-late"), make_message("m-2", "t-never")],
            message_channel,
            None,
        )
        thread = MessageThreadFactory(message_channel=message_channel, external_id="t-late")

        assert persistence.relink_orphan_messages(message_channel) == 1
        assert Message.objects.get(external_id="m-1").message_thread == thread
        assert Message.objects.get(external_id="m-2").is_orphan
        assert persistence.relink_orphan_messages(message_channel) == 0
