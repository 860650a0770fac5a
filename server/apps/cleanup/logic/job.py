"""Cleanup job running every retention cleaner against one cutoff."""

import logging
from collections.abc import Sequence
from datetime import datetime

from server.apps.cleanup.exceptions import CleanupError
from server.apps.cleanup.logic.retention import RetentionCleaner
from server.apps.files.logic.retention import ExpiredFileEntries
from server.apps.history.logic.retention import ExpiredHistoricExecutions

logger = logging.getLogger(__name__)


def default_cleaners(page_size: int | None = None) -> list[RetentionCleaner]:
    """Build the cleaners run by the cleanup job, in execution order.

    Args:
        page_size: Items per page, from settings if None.

    Returns:
        Cleaners for historic executions and files.
    """
    return [
        RetentionCleaner(ExpiredHistoricExecutions(), page_size=page_size),
        RetentionCleaner(ExpiredFileEntries(), page_size=page_size),
    ]


def run_cleanup(
    expiration_time: datetime,
    cleaners: Sequence[RetentionCleaner] | None = None,
) -> dict[str, int]:
    """Run every cleaner against ``expiration_time``.

    A cleaner failing to count or fetch its items does not stop the
    others. Once all of them ran, the failures are raised together.

    Args:
        expiration_time: Retention cutoff.
        cleaners: Cleaners to run, ``default_cleaners()`` if None.

    Returns:
        Number of deleted items per cleaner name.

    Raises:
        CleanupError: If any cleaner failed.
    """
    if cleaners is None:
        cleaners = default_cleaners()

    deleted: dict[str, int] = {}
    failed: list[str] = []
    for cleaner in cleaners:
        try:
            deleted[cleaner.name] = cleaner.execute(expiration_time)
        except Exception:
            logger.exception('Cleanup of %s failed', cleaner.name)
            failed.append(cleaner.name)

    if failed:
        raise CleanupError(failed)
    return deleted
