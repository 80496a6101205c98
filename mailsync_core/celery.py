"""Celery configuration for the mailbox sync project."""

import os

from celery import Celery

# Set the default Django settings module for the 'celery' program
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mailsync_core.settings.dev")

app = Celery("mailsync")

# All CELERY_* Django settings become Celery configuration
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

app.conf.update(
    task_time_limit=90 * 60,  # 90 minutes max task execution time
    task_soft_time_limit=60 * 60,
    worker_max_tasks_per_child=1000,
    worker_hijack_root_logger=False,
    task_default_queue="default",
    result_expires=60 * 60 * 24 * 7,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_task_log_format=(
        "%(asctime)s [%(process)d] [%(levelname)s] "
        "[%(task_name)s(%(task_id)s)] %(message)s"
    ),
)

app.conf.beat_schedule = {
    "sync-connected-accounts-every-15-minutes": {
        "task": "messaging.tasks.sync.sync_all_connected_accounts",
        "schedule": 60 * 15,
        "args": (),
        "options": {"expires": 60 * 14},
    },
}
