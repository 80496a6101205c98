"""Messaging services package.

Service modules are split by responsibility: account resolution, the local
ledger, persistence and the sync orchestration that ties them together.
"""

from .base_service import ResolvedAccount, WorkspaceStore
from .ledger_service import KnownState, LedgerService
from .persistence_service import MessageSaveResult, PersistenceService
from .sync_service import MessageSyncService, SyncReport, relink_orphans, sync_account

__all__ = [
    "WorkspaceStore",
    "ResolvedAccount",
    "KnownState",
    "LedgerService",
    "MessageSaveResult",
    "PersistenceService",
    "MessageSyncService",
    "SyncReport",
    "sync_account",
    "relink_orphans",
]
