from django.core.management.base import BaseCommand, CommandError

from messaging.exceptions import MessagingError
from messaging.services import MessageSyncService


class Command(BaseCommand):
    help = "Sync new threads and messages of one connected account"

    def add_arguments(self, parser):
        parser.add_argument("--workspace-id", required=True, help="Workspace id")
        parser.add_argument(
            "--account-id", required=True, help="Connected account id to sync",
        )
        parser.add_argument(
            "--max-results",
            type=int,
            default=None,
            help="Maximum number of threads to list (default: MAX_RESULTS)",
        )
        parser.add_argument(
            "--relink-orphans",
            action="store_true",
            help="Only relink orphan messages to their threads; no provider calls",
        )

    def handle(self, *args, **options):
        service = MessageSyncService()
        workspace_id = options["workspace_id"]
        account_id = options["account_id"]

        try:
            if options["relink_orphans"]:
                relinked = service.relink_orphans(workspace_id, account_id)
                self.stdout.write(self.style.SUCCESS(f"Relinked {relinked} orphan messages"))
                return

            report = service.sync_account(workspace_id, account_id, options["max_results"])
        except MessagingError as e:
            raise CommandError(f"Sync failed: {e!s}")

        self.stdout.write("\n--- Sync Results ---")
        self.stdout.write(f"Threads listed: {report.threads_listed}")
        self.stdout.write(f"Threads saved: {report.threads_saved}")
        self.stdout.write(f"Messages listed: {report.messages_listed}")
        self.stdout.write(f"Messages saved: {report.messages_saved}")
        self.stdout.write(f"Messages skipped: {report.messages_skipped}")
        self.stdout.write(f"Duration: {report.duration_seconds:.2f} seconds")

        if report.orphan_message_ids:
            self.stdout.write(
                self.style.WARNING(
                    f"Messages saved without thread: {', '.join(report.orphan_message_ids)}",
                ),
            )
        if report.failed_message_ids:
            self.stdout.write(
                self.style.ERROR(f"Failed messages: {', '.join(report.failed_message_ids)}"),
            )
        else:
            self.stdout.write(self.style.SUCCESS("✓ Sync completed successfully"))
