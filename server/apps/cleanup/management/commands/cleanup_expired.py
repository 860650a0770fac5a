"""Management command to delete expired files and historic executions."""

from datetime import timedelta
from typing import Any, final, override

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from server.apps.cleanup.exceptions import CleanupError
from server.apps.cleanup.logic.job import default_cleaners, run_cleanup


@final
class Command(BaseCommand):
    """Delete records older than the retention period.

    Meant to be run periodically by a single scheduler (cron or
    similar); concurrent runs are not guarded against.
    """

    help = 'Delete expired files and historic executions'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--retention-days',
            type=int,
            default=settings.CLEANUP_RETENTION_DAYS,
            help='Delete records older than this many days '
            f'(default: {settings.CLEANUP_RETENTION_DAYS})',
        )
        parser.add_argument(
            '--page-size',
            type=int,
            default=settings.CLEANUP_PAGE_SIZE,
            help='Records fetched per page '
            f'(default: {settings.CLEANUP_PAGE_SIZE})',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        retention_days = options['retention_days']
        if retention_days < 0:
            raise CommandError('--retention-days must not be negative')
        if options['page_size'] < 1:
            raise CommandError('--page-size must be positive')

        expiration_time = timezone.now() - timedelta(days=retention_days)
        self.stdout.write(
            f'Deleting records older than {expiration_time} '
            f'({retention_days} days)',
        )

        try:
            deleted = run_cleanup(
                expiration_time,
                default_cleaners(page_size=options['page_size']),
            )
        except CleanupError as error:
            raise CommandError(str(error)) from error

        for name, count in deleted.items():
            self.stdout.write(
                self.style.SUCCESS(f'Deleted {count} {name}'),
            )
