from django.conf import settings
from django.core.management.base import BaseCommand

from changelogs.services import prune_change_logs


class Command(BaseCommand):
    help = "Delete change log entries older than the retention window."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=settings.CHANGE_LOG_RETENTION_DAYS,
            help="Delete entries older than this many days.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without actually deleting.",
        )

    def handle(self, *args, **options):
        days = options["days"]
        dry_run = options["dry_run"]
        count = prune_change_logs(days=days, dry_run=dry_run)

        if dry_run:
            self.stdout.write(
                self.style.WARNING(
                    f"DRY RUN: Would delete {count} change logs older than {days} days."
                )
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f"Deleted {count} change logs older than {days} days.")
            )
