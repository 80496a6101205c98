"""messaging.channels.adapters.base

Provider-neutral interface of the Remote Lister. The sync engine only talks
to a provider through these three calls, always ids before bodies:

1. ``list_threads`` - thread ids plus a preview string, capped by a limit.
2. ``list_message_ids_for_threads`` - message ids per thread, no bodies.
3. ``fetch_messages`` - full messages for the ids the local store lacks.

Every call is all-or-nothing: it returns complete results or raises
``UpstreamUnavailableError``.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..utils import internal_date_to_datetime


@dataclass(frozen=True)
class RemoteThread:
    external_id: str
    snippet: str = ""


@dataclass(frozen=True)
class FullMessage:
    external_id: str
    thread_external_id: str
    header_message_id: str
    subject: str
    from_handle: str
    from_display_name: str
    internal_date: str
    text: str

    @property
    def date(self) -> datetime:
        return internal_date_to_datetime(self.internal_date)


class BaseInboundAdapter(abc.ABC):
    """Base class for adapters that read mailbox contents from a provider."""

    def __init__(self, account):
        if not account:
            raise ValueError("ConnectedAccount must be provided")
        self.account = account

    @abc.abstractmethod
    def list_threads(self, limit: int) -> list[RemoteThread]:
        raise NotImplementedError

    @abc.abstractmethod
    def list_message_ids_for_threads(
        self, thread_external_ids: list[str],
    ) -> dict[str, list[str]]:
        raise NotImplementedError

    @abc.abstractmethod
    def fetch_messages(self, message_external_ids: list[str]) -> list[FullMessage]:
        raise NotImplementedError

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"<{self.__class__.__name__} account={self.account_id}>"

    @property
    def account_id(self) -> Any:
        return getattr(self.account, "id", None)
