"""Expired files for the retention cleanup."""

from datetime import datetime
from typing import final

from server.apps.files.logic.file_operations import delete_file
from server.apps.files.models import FileEntry


@final
class ExpiredFileEntries:
    """Files created before the cutoff, oldest first.

    Each file is deleted through ``delete_file``, content before metadata.
    """

    name = 'files'

    def count(self, cutoff: datetime) -> int:
        return FileEntry.objects.modified_before(cutoff).count()

    def fetch_page(self, cutoff: datetime, page_size: int) -> list[FileEntry]:
        return list(
            FileEntry.objects.modified_before(cutoff).order_by(
                'modified',
            )[:page_size],
        )

    def delete_one(self, item: FileEntry) -> bool:
        return delete_file(item.space, item.id)

    def describe(self, item: FileEntry) -> str:
        return f'file {item.id} in space {item.space}'
