"""Gmail API adapter implementation.

Lists threads, lists message ids per thread and fetches raw messages for one
connected account using OAuth2 credentials stored on the account.
"""

import uuid
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from mailsync_core.utils.logging import ContextLogger

from ...config import get_config
from ...exceptions import ConfigurationError, UpstreamUnavailableError
from ..utils import decode_base64url, parse_mime_message
from .base import BaseInboundAdapter, FullMessage, RemoteThread
from .batch import UPSTREAM_ERRORS, GmailBatchFetcher


GMAIL_READONLY_SCOPE = "https://www.googleapis.com/auth/gmail.readonly"

# Largest page users.threads.list will return
MAX_PAGE_SIZE = 500


class GmailClientProvider:
    """Builds authenticated Gmail API clients from a connected account."""

    def get_credentials(self, account) -> Credentials:
        """Build OAuth2 credentials; google-auth refreshes the access token.

        Raises
        ------
            ConfigurationError: If the OAuth client id or secret is missing

        """
        client_id = get_config("GMAIL_CLIENT_ID")
        client_secret = get_config("GMAIL_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise ConfigurationError("Missing Gmail OAuth client configuration")

        return Credentials(
            token=account.access_token or None,
            refresh_token=account.refresh_token,
            token_uri=get_config("GMAIL_TOKEN_URI"),
            client_id=client_id,
            client_secret=client_secret,
            scopes=[GMAIL_READONLY_SCOPE],
        )

    def get_gmail_client(self, account):
        return build(
            "gmail",
            "v1",
            credentials=self.get_credentials(account),
            cache_discovery=False,
        )


class GmailAdapter(BaseInboundAdapter):
    """Gmail API adapter for reading threads and messages."""

    def __init__(self, account, client_provider=None, batch_size=None):
        super().__init__(account)
        self.client_provider = client_provider or GmailClientProvider()
        self.batch_size = batch_size
        self.service = None
        self.request_id = str(uuid.uuid4())

        # Context is scoped to this adapter instance
        self.logger = ContextLogger(__name__)
        self.logger.set_context(
            account_id=str(account.id),
            adapter="GmailAdapter",
            request_id=self.request_id,
        )

    def connect(self) -> None:
        """Create the Gmail API client.

        Raises
        ------
            UpstreamUnavailableError: If the discovery client cannot be built

        """
        if self.service is not None:
            return
        try:
            self.service = self.client_provider.get_gmail_client(self.account)
        except UPSTREAM_ERRORS as e:
            error_msg = f"Failed to connect to Gmail API: {e!s}"
            self.logger.error(error_msg)
            raise UpstreamUnavailableError(error_msg) from e
        self.logger.debug("Connected to Gmail API")

    def _execute(self, request) -> dict[str, Any]:
        try:
            return request.execute()
        except UPSTREAM_ERRORS as e:
            error_msg = f"Gmail API request failed: {e!s}"
            self.logger.error(error_msg)
            raise UpstreamUnavailableError(error_msg) from e

    def _batch_fetcher(self) -> GmailBatchFetcher:
        return GmailBatchFetcher(self.service, batch_size=self.batch_size)

    def list_threads(self, limit: int) -> list[RemoteThread]:
        """List up to ``limit`` threads, newest first, following page tokens."""
        if limit <= 0:
            return []
        self.connect()

        threads: list[RemoteThread] = []
        page_token = None
        while len(threads) < limit:
            params = {
                "userId": "me",
                "maxResults": min(limit - len(threads), MAX_PAGE_SIZE),
            }
            if page_token:
                params["pageToken"] = page_token

            response = self._execute(self.service.users().threads().list(**params))
            threads.extend(
                RemoteThread(external_id=item["id"], snippet=item.get("snippet", ""))
                for item in response.get("threads", [])
            )

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        self.logger.info(f"Listed {len(threads)} threads from Gmail API")
        return threads[:limit]

    def list_message_ids_for_threads(
        self, thread_external_ids: list[str],
    ) -> dict[str, list[str]]:
        """Map each thread id to its message ids using the minimal format."""
        if not thread_external_ids:
            return {}
        self.connect()

        threads = self.service.users().threads()
        payloads = self._batch_fetcher().fetch(
            [
                threads.get(userId="me", id=thread_id, format="minimal")
                for thread_id in thread_external_ids
            ],
        )
        return {
            thread_id: [message["id"] for message in (payload or {}).get("messages", [])]
            for thread_id, payload in zip(thread_external_ids, payloads)
        }

    def fetch_messages(self, message_external_ids: list[str]) -> list[FullMessage]:
        """Fetch and parse full messages using the raw format."""
        if not message_external_ids:
            return []
        self.connect()

        messages = self.service.users().messages()
        payloads = self._batch_fetcher().fetch(
            [
                messages.get(userId="me", id=message_id, format="raw")
                for message_id in message_external_ids
            ],
        )
        parsed = [self._parse_gmail_message(payload or {}) for payload in payloads]
        self.logger.info(f"Fetched {len(parsed)} messages from Gmail API")
        return parsed

    def _parse_gmail_message(self, gmail_message: dict[str, Any]) -> FullMessage:
        raw = gmail_message.get("raw")
        if not raw or not gmail_message.get("id"):
            raise UpstreamUnavailableError(
                f"Gmail returned an incomplete message payload: {gmail_message.get('id')}",
            )

        parsed = parse_mime_message(decode_base64url(raw))
        return FullMessage(
            external_id=gmail_message["id"],
            thread_external_id=gmail_message.get("threadId", ""),
            header_message_id=parsed["header_message_id"],
            subject=parsed["subject"],
            from_handle=parsed["from_handle"],
            from_display_name=parsed["from_display_name"],
            internal_date=gmail_message.get("internalDate", ""),
            text=parsed["text"],
        )
