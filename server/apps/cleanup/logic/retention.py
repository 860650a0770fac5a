"""Paginated expiry of old records.

The same algorithm expires unrelated kinds of records. Each kind plugs
in through ``ExpiredItems``, which knows how to count, fetch and delete
its own expired items; ``RetentionCleaner`` owns the paging loop.

Every page is fetched again by cutoff rather than by offset, so items
deleted by earlier pages (or by somebody else) simply drop out of later
queries. A run interrupted halfway can be repeated and only sees what is
still expired.

Two runs must not overlap: there is no locking between them, the single
active scheduler is a precondition.
"""

import logging
import math
from datetime import datetime
from typing import Final, Generic, Protocol, TypeVar, final

from django.conf import settings

logger = logging.getLogger(__name__)

_T = TypeVar('_T')

DEFAULT_PAGE_SIZE: Final = 100


class ExpiredItems(Protocol[_T]):
    """Access to the expired items of one kind of record."""

    #: Human readable name of the items, used in log messages.
    name: str

    def count(self, cutoff: datetime) -> int:
        """Count items that expired before ``cutoff``."""

    def fetch_page(self, cutoff: datetime, page_size: int) -> list[_T]:
        """Fetch up to ``page_size`` items that expired before ``cutoff``."""

    def delete_one(self, item: _T) -> bool:
        """Delete one item, returning whether it was actually deleted."""

    def describe(self, item: _T) -> str:
        """Identify ``item`` in log messages."""


@final
class RetentionCleaner(Generic[_T]):
    """Deletes expired items page by page, tolerating per-item failures.

    Faults while counting or fetching pages propagate to the caller.
    Faults while deleting a single item are logged and that item is
    skipped; they never abort the run.
    """

    def __init__(
        self,
        items: ExpiredItems[_T],
        page_size: int | None = None,
    ) -> None:
        """Initialize RetentionCleaner.

        Args:
            items: Expired items to clean up.
            page_size: Items fetched per page, from settings if None.
        """
        if page_size is None:
            page_size = getattr(settings, 'CLEANUP_PAGE_SIZE', DEFAULT_PAGE_SIZE)
        if page_size < 1:
            raise ValueError(f'Page size must be positive, got {page_size}')
        self.items = items
        self.page_size = page_size

    @property
    def name(self) -> str:
        """Name of the cleaned up items."""
        return self.items.name

    def execute(self, expiration_time: datetime) -> int:
        """Delete every item that expired before ``expiration_time``.

        Args:
            expiration_time: Retention cutoff.

        Returns:
            Number of successfully deleted items.
        """
        logger.info(
            'Will delete %s before %s',
            self.name,
            expiration_time.isoformat(),
        )
        total = self.items.count(expiration_time)
        pages = math.ceil(total / self.page_size)
        logger.debug(
            'Found %d expired %s in %d pages',
            total,
            self.name,
            pages,
        )

        deleted = 0
        for _ in range(pages):
            deleted += self._delete_page(expiration_time)

        logger.info('Deleted %d %s', deleted, self.name)
        return deleted

    def _delete_page(self, expiration_time: datetime) -> int:
        page = self.items.fetch_page(expiration_time, self.page_size)
        return sum(1 for item in page if self._delete_safely(item))

    def _delete_safely(self, item: _T) -> bool:
        description = self.items.describe(item)
        try:
            logger.debug('Deleting %s', description)
            deleted = self.items.delete_one(item)
        except Exception:
            logger.warning(
                'Could not delete %s',
                description,
                exc_info=True,
            )
            return False
        if not deleted:
            logger.debug('%s was already gone', description)
        return deleted
