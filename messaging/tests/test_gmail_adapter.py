"""
Tests for the Gmail adapter.

The Gmail discovery client is replaced by a MagicMock; batch requests are
simulated by ``FakeBatch`` which replays canned payloads through the
callback exactly like ``BatchHttpRequest`` does.
"""

import base64
import uuid
from email.message import EmailMessage
from unittest import mock

import httplib2
import pytest
from django.test import SimpleTestCase
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from ..channels.adapters.base import FullMessage, RemoteThread
from ..channels.adapters.factory import get_adapter
from ..channels.adapters.gmail import GmailAdapter, GmailClientProvider
from ..exceptions import ConfigurationError, UpstreamUnavailableError


def http_error(status=503):
    return HttpError(
        httplib2.Response({"status": status}),
        b'{"error": {"message": "Backend Error"}}',
    )


def raw_message(subject="Hello", sender="Alice <alice@example.com>", body="Hi Bob"):
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = "bob@example.com"
    msg["Subject"] = subject
    msg["Message-ID"] = f"<{subject.lower()}@mail.example.com>"
    msg.set_content(body)
    return base64.urlsafe_b64encode(msg.as_bytes()).decode().rstrip("=")


class FakeBatch:
    """Stand-in for ``BatchHttpRequest``; requests are (kind, id) tuples."""

    def __init__(self, callback, payloads):
        self.callback = callback
        self.payloads = payloads
        self.requests = []

    def add(self, request, request_id=None):
        self.requests.append((request_id, request))

    def execute(self):
        for request_id, (_kind, external_id) in self.requests:
            payload = self.payloads[external_id]
            if isinstance(payload, Exception):
                self.callback(request_id, None, payload)
            else:
                self.callback(request_id, payload, None)


class GmailAdapterTestCase(SimpleTestCase):
    def setUp(self):
        self.account = mock.Mock(id=uuid.uuid4(), access_token="at", refresh_token="rt")
        self.service = mock.MagicMock()
        self.client_provider = mock.Mock()
        self.client_provider.get_gmail_client.return_value = self.service

        self.threads_api = self.service.users.return_value.threads.return_value
        self.messages_api = self.service.users.return_value.messages.return_value
        self.threads_api.get.side_effect = lambda **kwargs: ("thread", kwargs["id"])
        self.messages_api.get.side_effect = lambda **kwargs: ("message", kwargs["id"])

        self.payloads = {}
        self.batches = []

        def new_batch(callback):
            batch = FakeBatch(callback, self.payloads)
            self.batches.append(batch)
            return batch

        self.service.new_batch_http_request.side_effect = new_batch
        self.adapter = GmailAdapter(self.account, client_provider=self.client_provider)

    # list_threads

    def test_list_threads_follows_page_tokens(self):
        self.threads_api.list.return_value.execute.side_effect = [
            {
                "threads": [{"id": "t-1", "snippet": "One"}, {"id": "t-2", "snippet": "Two"}],
                "nextPageToken": "page-2",
            },
            {"threads": [{"id": "t-3", "snippet": "Three"}, {"id": "t-4"}]},
        ]

        threads = self.adapter.list_threads(3)

        assert threads == [
            RemoteThread("t-1", "One"),
            RemoteThread("t-2", "Two"),
            RemoteThread("t-3", "Three"),
        ]
        assert self.threads_api.list.call_args_list == [
            mock.call(userId="me", maxResults=3),
            mock.call(userId="me", maxResults=1, pageToken="page-2"),
        ]

    def test_list_threads_caps_page_size(self):
        self.threads_api.list.return_value.execute.return_value = {"threads": []}

        assert self.adapter.list_threads(2000) == []
        self.threads_api.list.assert_called_once_with(userId="me", maxResults=500)

    def test_list_threads_with_zero_limit(self):
        assert self.adapter.list_threads(0) == []
        self.client_provider.get_gmail_client.assert_not_called()

    def test_list_threads_upstream_error(self):
        self.threads_api.list.return_value.execute.side_effect = http_error()

        with self.assertRaises(UpstreamUnavailableError):
            self.adapter.list_threads(10)

    def test_connect_failure(self):
        self.client_provider.get_gmail_client.side_effect = RefreshError("invalid_grant")

        with self.assertRaises(UpstreamUnavailableError):
            self.adapter.list_threads(10)

    def test_client_is_built_once(self):
        self.threads_api.list.return_value.execute.return_value = {"threads": []}

        self.adapter.list_threads(5)
        self.adapter.list_threads(5)

        self.client_provider.get_gmail_client.assert_called_once_with(self.account)

    # list_message_ids_for_threads

    def test_list_message_ids_uses_minimal_format(self):
        self.payloads.update(
            {
                "t-1": {"id": "t-1", "messages": [{"id": "m-1"}, {"id": "m-2"}]},
                "t-2": {"id": "t-2", "messages": [{"id": "m-3"}]},
                "t-3": {"id": "t-3"},
            },
        )

        result = self.adapter.list_message_ids_for_threads(["t-1", "t-2", "t-3"])

        assert result == {"t-1": ["m-1", "m-2"], "t-2": ["m-3"], "t-3": []}
        self.threads_api.get.assert_any_call(userId="me", id="t-1", format="minimal")
        self.messages_api.get.assert_not_called()

    def test_list_message_ids_in_chunks(self):
        adapter = GmailAdapter(
            self.account, client_provider=self.client_provider, batch_size=2,
        )
        thread_ids = [f"t-{n}" for n in range(5)]
        for thread_id in thread_ids:
            self.payloads[thread_id] = {"messages": [{"id": f"m-{thread_id}"}]}

        result = adapter.list_message_ids_for_threads(thread_ids)

        assert list(result) == thread_ids
        assert [len(batch.requests) for batch in self.batches] == [2, 2, 1]

    def test_batch_size_is_capped(self):
        adapter = GmailAdapter(
            self.account, client_provider=self.client_provider, batch_size=500,
        )
        thread_ids = [f"t-{n}" for n in range(150)]
        for thread_id in thread_ids:
            self.payloads[thread_id] = {"messages": []}

        adapter.list_message_ids_for_threads(thread_ids)

        assert [len(batch.requests) for batch in self.batches] == [100, 50]

    def test_failed_batch_entry_fails_the_call(self):
        self.payloads.update({"t-1": {"messages": []}, "t-2": http_error(404)})

        with self.assertRaises(UpstreamUnavailableError):
            self.adapter.list_message_ids_for_threads(["t-1", "t-2"])

    def test_failed_batch_request(self):
        self.service.new_batch_http_request.side_effect = None
        self.service.new_batch_http_request.return_value.execute.side_effect = (
            httplib2.HttpLib2Error("connection reset")
        )

        with self.assertRaises(UpstreamUnavailableError):
            self.adapter.list_message_ids_for_threads(["t-1"])

    def test_no_threads_makes_no_requests(self):
        assert self.adapter.list_message_ids_for_threads([]) == {}
        self.service.new_batch_http_request.assert_not_called()

    # fetch_messages

    def test_fetch_messages_parses_raw_format(self):
        self.payloads["m-1"] = {
            "id": "m-1",
            "threadId": "t-1",
            "internalDate": "1700000000000",
            "raw": raw_message(),
        }

        messages = self.adapter.fetch_messages(["m-1"])

        assert messages == [
            FullMessage(
                external_id="m-1",
                thread_external_id="t-1",
                header_message_id="<hello@mail.example.com>",
                subject="Hello",
                from_handle="alice@example.com",
                from_display_name="Alice",
                internal_date="1700000000000",
                text="Hi Bob\n",
            ),
        ]
        self.messages_api.get.assert_called_once_with(userId="me", id="m-1", format="raw")

    def test_fetch_messages_keeps_request_order(self):
        for n in (3, 1, 2):
            self.payloads[f"m-{n}"] = {
                "id": f"m-{n}",
                "threadId": "t-1",
                "internalDate": "0",
                "raw": raw_message(subject=f"S{n}"),
            }

        messages = self.adapter.fetch_messages(["m-3", "m-1", "m-2"])

        assert [m.external_id for m in messages] == ["m-3", "m-1", "m-2"]
        assert [m.subject for m in messages] == ["S3", "S1", "S2"]

    def test_incomplete_payload_fails_the_call(self):
        self.payloads["m-1"] = {"id": "m-1", "threadId": "t-1"}

        with self.assertRaises(UpstreamUnavailableError):
            self.adapter.fetch_messages(["m-1"])

    def test_log_context_belongs_to_each_adapter(self):
        other_account = mock.Mock(id=uuid.uuid4(), access_token="at", refresh_token="rt")
        other = GmailAdapter(other_account, client_provider=self.client_provider)

        self.assertEqual(self.adapter.logger.current_context["account_id"], str(self.account.id))
        self.assertEqual(other.logger.current_context["account_id"], str(other_account.id))


@pytest.mark.django_db
class TestGmailClientProvider:
    def test_builds_client_from_account_tokens(self, connected_account):
        with mock.patch("messaging.channels.adapters.gmail.build") as mock_build:
            GmailClientProvider().get_gmail_client(connected_account)

        args, kwargs = mock_build.call_args
        assert args == ("gmail", "v1")
        assert kwargs["cache_discovery"] is False
        credentials = kwargs["credentials"]
        assert credentials.token == connected_account.access_token
        assert credentials.refresh_token == connected_account.refresh_token
        assert credentials.client_id == "test-client-id"
        assert credentials.client_secret == "test-client-secret"

    def test_missing_client_configuration(self, settings, connected_account):
        settings.MESSAGING_GMAIL_CLIENT_ID = None

        with pytest.raises(ConfigurationError):
            GmailClientProvider().get_credentials(connected_account)


@pytest.mark.django_db
class TestAdapterFactory:
    def test_gmail_account_gets_gmail_adapter(self, connected_account):
        adapter = get_adapter(connected_account)

        assert isinstance(adapter, GmailAdapter)
        assert adapter.account == connected_account

    def test_unknown_provider(self, connected_account):
        connected_account.provider = "outlook"

        with pytest.raises(ConfigurationError):
            get_adapter(connected_account)
