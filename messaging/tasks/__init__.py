"""messaging.tasks

Celery tasks for the messaging app.
"""

from .sync import sync_all_connected_accounts, sync_connected_account

__all__ = [
    "sync_connected_account",
    "sync_all_connected_accounts",
]
