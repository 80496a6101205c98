from celery import shared_task
from django.utils import timezone

from mailsync_core.utils.logging import ContextLogger, with_request_id

from ..config import get_config
from ..enums import Provider
from ..exceptions import (
    NotFoundError,
    PreconditionFailedError,
    SyncInProgressError,
    UpstreamUnavailableError,
    WorkspaceNotFoundError,
)
from ..models import ConnectedAccount, WorkspaceDataSource
from ..services import MessageSyncService

logger = ContextLogger(__name__)


@shared_task(
    bind=True,
    max_retries=get_config("MAX_RETRIES"),
    default_retry_delay=get_config("RETRY_DELAY"),
)
@with_request_id
def sync_connected_account(
    self, workspace_id, connected_account_id, max_results=None, _request_id=None,
):
    """Celery task syncing one connected account.

    Upstream failures are retried by Celery; the sync engine itself never
    retries. Unknown accounts and failed preconditions end the task with a
    status instead of an error.
    """
    result = {
        "workspace_id": str(workspace_id),
        "account_id": str(connected_account_id),
    }
    service = MessageSyncService(request_id=_request_id)

    with logger.context(
        request_id=_request_id,
        task_id=self.request.id,
        workspace_id=str(workspace_id),
        account_id=str(connected_account_id),
        task_name="sync_connected_account",
        retry_count=self.request.retries,
    ):
        try:
            logger.info("Starting mailbox sync task")
            report = service.sync_account(workspace_id, connected_account_id, max_results)
        except SyncInProgressError as e:
            logger.info("Sync already running for account, skipping")
            return {**result, "status": "skipped", "error": str(e)}
        except NotFoundError as e:
            logger.warning("Account or workspace not found", extra_context={"error": str(e)})
            return {**result, "status": "not_found", "error": str(e)}
        except PreconditionFailedError as e:
            logger.warning("Account cannot be synced", extra_context={"error": str(e)})
            return {**result, "status": "precondition_failed", "error": str(e)}
        except UpstreamUnavailableError as e:
            logger.warning(
                "Provider unavailable. Scheduling retry.",
                extra_context={
                    "error": str(e),
                    "next_retry": (
                        timezone.now() + timezone.timedelta(seconds=get_config("RETRY_DELAY"))
                    ).isoformat(),
                },
            )
            raise self.retry(exc=e)

        logger.info("Mailbox sync task completed")
        return {**result, "status": "success", **report.as_dict()}


def _schedule_workspace(service, workspace_id):
    """Queue one sync task per syncable account of a workspace."""
    store = service.resolve_store(workspace_id)
    accounts = (
        ConnectedAccount.objects.using(store.alias)
        .filter(provider=Provider.GMAIL, refresh_token__isnull=False)
        .exclude(refresh_token="")
        .values_list("id", flat=True)
    )
    scheduled = []
    for account_id in accounts:
        task = sync_connected_account.delay(str(workspace_id), str(account_id))
        scheduled.append(
            {
                "workspace_id": str(workspace_id),
                "account_id": str(account_id),
                "task_id": task.id,
            },
        )
    return scheduled


@shared_task
@with_request_id
def sync_all_connected_accounts(_request_id=None):
    """Schedule one sync task per Gmail account with a refresh token, in every workspace."""
    started_at = timezone.now()
    service = MessageSyncService(request_id=_request_id)
    workspace_ids = (
        WorkspaceDataSource.objects.order_by()
        .values_list("workspace_id", flat=True)
        .distinct()
    )

    scheduled = []
    errors = 0
    with logger.context(
        request_id=_request_id,
        task_name="sync_all_connected_accounts",
        batch_start_time=started_at.isoformat(),
    ):
        for workspace_id in workspace_ids:
            with logger.context(workspace_id=str(workspace_id)):
                try:
                    scheduled.extend(_schedule_workspace(service, workspace_id))
                except WorkspaceNotFoundError as e:
                    errors += 1
                    logger.error("Skipping workspace", extra_context={"error": str(e)})

        duration = (timezone.now() - started_at).total_seconds()
        logger.info(
            "Mailbox sync batch scheduled",
            extra_context={
                "scheduled": len(scheduled),
                "errors": errors,
                "duration_seconds": duration,
            },
        )
    return {
        "scheduled": len(scheduled),
        "errors": errors,
        "duration_seconds": duration,
        "tasks": scheduled,
    }
