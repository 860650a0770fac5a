"""Database models for history app."""

import uuid
from datetime import datetime
from typing import Final, final, override

from django.db import models

_DEFINITION_KEY_MAX_LENGTH: Final = 255
_SPACE_MAX_LENGTH: Final = 255


class HistoricExecutionQuerySet(models.QuerySet['HistoricExecution']):
    """Queries for historic executions."""

    def expired(self, cutoff: datetime) -> 'HistoricExecutionQuerySet':
        """Finished root executions started before ``cutoff``.

        Sub-executions are never selected on their own: they go away
        together with their root.
        """
        return self.filter(
            parent__isnull=True,
            ended_at__isnull=False,
            started_at__lt=cutoff,
        )


@final
class HistoricExecution(models.Model):
    """Record of a workflow execution kept after it ended.

    Executions started by another execution point to it through
    ``parent`` and are deleted with it.
    """

    id = models.UUIDField(  # noqa: WPS125
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='children',
        null=True,
        blank=True,
    )

    process_definition_key = models.CharField(
        max_length=_DEFINITION_KEY_MAX_LENGTH,
    )

    space = models.CharField(
        max_length=_SPACE_MAX_LENGTH,
        blank=True,
        default='',
    )

    started_at = models.DateTimeField(db_index=True)

    ended_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Empty while the execution is still running',
    )

    objects = HistoricExecutionQuerySet.as_manager()

    class Meta:
        """Model metadata."""

        verbose_name = 'Historic execution'  # type: ignore[mutable-override]
        verbose_name_plural = 'Historic executions'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.process_definition_key}:{self.id}'
