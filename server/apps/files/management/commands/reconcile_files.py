"""Management command to remove file entries whose content is missing."""

from typing import Any, final, override

from django.core.management.base import BaseCommand, CommandError

from server.apps.files.exceptions import FileStorageError
from server.apps.files.logic.file_operations import (
    delete_file_entries_without_content,
)


@final
class Command(BaseCommand):
    """Delete file metadata rows that have no content in storage."""

    help = 'Remove file entries whose content is missing from storage'

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation.

        Args:
            args: Positional arguments (unused).
            options: Command options (unused).
        """
        try:
            removed = delete_file_entries_without_content()
        except FileStorageError as error:
            raise CommandError(str(error)) from error

        self.stdout.write(
            self.style.SUCCESS(f'Removed {removed} file entries without content'),
        )
