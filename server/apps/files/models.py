"""Database models for files app."""

from collections.abc import Iterable
from datetime import datetime
from typing import Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_ID_MAX_LENGTH: Final = 36  # UUID string length
_SPACE_MAX_LENGTH: Final = 255
_NAME_MAX_LENGTH: Final = 255
_DIGEST_MAX_LENGTH: Final = 128  # Fits SHA-512 hex
_DIGEST_ALGORITHM_MAX_LENGTH: Final = 32


class FileEntryQuerySet(models.QuerySet['FileEntry']):
    """Metadata store queries for file entries."""

    def for_file(self, space: str, file_id: str) -> 'FileEntryQuerySet':
        """Entries matching one file id in one space."""
        return self.filter(space=space, id=file_id)

    def for_space_and_namespace(
        self,
        space: str,
        namespace: str | None,
    ) -> 'FileEntryQuerySet':
        """Entries in a space and namespace.

        A ``None`` namespace matches entries stored without a namespace.
        """
        return self.filter(space=space, namespace=namespace)

    def for_spaces(self, spaces: Iterable[str]) -> 'FileEntryQuerySet':
        """Entries belonging to any of the given spaces."""
        return self.filter(space__in=list(spaces))

    def modified_before(self, cutoff: datetime) -> 'FileEntryQuerySet':
        """Entries created strictly before ``cutoff``."""
        return self.filter(modified__lt=cutoff)

    def for_entries(
        self,
        entries: Iterable['FileEntry'],
    ) -> 'FileEntryQuerySet':
        """Entries with the same ids as the given ones."""
        return self.filter(id__in=[entry.id for entry in entries])


@final
class FileEntry(models.Model):
    """Metadata of one blob stored in the blob store.

    The blob is addressed by ``(space, id)``. Rows are written once
    after the blob has been stored and are never updated afterwards,
    so ``modified`` is effectively the creation time.
    """

    id = models.CharField(  # noqa: WPS125
        primary_key=True,
        max_length=_ID_MAX_LENGTH,
        editable=False,
    )

    space = models.CharField(
        max_length=_SPACE_MAX_LENGTH,
        db_index=True,
    )

    namespace = models.CharField(
        max_length=_SPACE_MAX_LENGTH,
        null=True,
        blank=True,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Display name supplied by the uploader',
    )

    size = models.BigIntegerField(
        help_text='Content size in bytes',
    )

    digest = models.CharField(
        max_length=_DIGEST_MAX_LENGTH,
        help_text='Hex digest of the content as uploaded',
    )

    digest_algorithm = models.CharField(
        max_length=_DIGEST_ALGORITHM_MAX_LENGTH,
    )

    modified = models.DateTimeField(db_index=True)

    objects = FileEntryQuerySet.as_manager()

    class Meta:
        """Model metadata."""

        db_table = settings.FILES_TABLE_NAME
        verbose_name = 'File entry'  # type: ignore[mutable-override]
        verbose_name_plural = 'File entries'  # type: ignore[mutable-override]

        indexes = [
            models.Index(
                fields=['space', 'namespace'],
                name='files_space_namespace_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.space}:{self.id} ({self.name})'
