"""Per-account mutual exclusion for sync runs, backed by the Django cache."""

import uuid

from django.core.cache import cache

from mailsync_core.utils.logging import ContextLogger

from ..config import get_config
from ..exceptions import SyncInProgressError

logger = ContextLogger(__name__)


class AccountSyncLock:
    """Advisory lock held for the duration of one account's sync run.

    ``cache.add`` only stores the key when it is absent, which makes it an
    atomic test-and-set on shared backends such as Redis. The timeout frees
    the lock if a worker dies mid-run.

    Usage:
        with AccountSyncLock(workspace_id, account_id):
            ...
    """

    def __init__(self, workspace_id, connected_account_id, timeout=None):
        self.key = f"messaging:sync-lock:{workspace_id}:{connected_account_id}"
        self.timeout = timeout or get_config("SYNC_LOCK_TIMEOUT")
        self.token = str(uuid.uuid4())
        self.acquired = False

    def acquire(self) -> bool:
        self.acquired = cache.add(self.key, self.token, timeout=self.timeout)
        return self.acquired

    def release(self) -> None:
        if not self.acquired:
            return
        # Only the owner may delete; an expired lock may belong to another run
        if cache.get(self.key) == self.token:
            cache.delete(self.key)
        self.acquired = False

    def __enter__(self):
        if not self.acquire():
            logger.warning("Sync already running", extra_context={"lock_key": self.key})
            raise SyncInProgressError(f"A sync is already running for {self.key}")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
