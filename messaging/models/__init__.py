"""Models for the ``messaging`` app, one module per concept.

``WorkspaceDataSource`` lives in the ``default`` database; every other model
lives in a workspace store and is queried with ``.using(alias)``.
"""

from __future__ import annotations

from .accounts import ConnectedAccount, WorkspaceMember
from .channels import MessageChannel
from .messages import Message, MessageRecipient
from .people import Person
from .threads import MessageThread
from .workspaces import WorkspaceDataSource

__all__ = [
    "WorkspaceDataSource",
    "WorkspaceMember",
    "ConnectedAccount",
    "MessageChannel",
    "MessageThread",
    "Message",
    "MessageRecipient",
    "Person",
]
