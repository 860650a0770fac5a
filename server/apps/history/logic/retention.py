"""Expired historic executions for the retention cleanup."""

from datetime import datetime
from typing import final

from django.db import transaction

from server.apps.history.models import HistoricExecution


@final
class ExpiredHistoricExecutions:
    """Finished root executions started before the cutoff, oldest first."""

    name = 'historic executions'

    def count(self, cutoff: datetime) -> int:
        return HistoricExecution.objects.expired(cutoff).count()

    def fetch_page(
        self,
        cutoff: datetime,
        page_size: int,
    ) -> list[HistoricExecution]:
        return list(
            HistoricExecution.objects.expired(cutoff).order_by(
                'started_at',
            )[:page_size],
        )

    def delete_one(self, item: HistoricExecution) -> bool:
        # Sub-executions cascade, keep the whole tree in one transaction
        with transaction.atomic():
            deleted, _ = HistoricExecution.objects.filter(pk=item.pk).delete()
        return deleted > 0

    def describe(self, item: HistoricExecution) -> str:
        return f'historic execution {item.id}'
