"""Shared fixtures for cleanup app tests."""

from datetime import datetime, timedelta

import pytest
from django.utils import timezone


class InMemoryItems:
    """Expired items kept in a list, recording every call.

    Items are ``(name, created)`` tuples. Items listed in ``failing``
    raise on deletion, like rows locked by another transaction.
    """

    name = 'records'

    def __init__(self, items, failing=()) -> None:
        self.items = list(items)
        self.failing = set(failing)
        self.fetched_pages: list[int] = []
        self.delete_attempts: list[str] = []

    def count(self, cutoff: datetime) -> int:
        return len(self._expired(cutoff))

    def fetch_page(self, cutoff: datetime, page_size: int):
        page = self._expired(cutoff)[:page_size]
        self.fetched_pages.append(len(page))
        return page

    def delete_one(self, item) -> bool:
        self.delete_attempts.append(item[0])
        if item[0] in self.failing:
            raise RuntimeError(f'{item[0]} is locked')
        if item not in self.items:
            return False
        self.items.remove(item)
        return True

    def describe(self, item) -> str:
        return f'record {item[0]}'

    def _expired(self, cutoff: datetime):
        return sorted(
            (item for item in self.items if item[1] < cutoff),
            key=lambda item: item[1],
        )


@pytest.fixture
def cutoff() -> datetime:
    """Retention cutoff one day ago."""
    return timezone.now() - timedelta(days=1)


@pytest.fixture
def make_items(cutoff):
    """Factory for in-memory expired records.

    Returns:
        Callable building an ``InMemoryItems`` with ``expired`` records
        older than the cutoff (oldest first) and ``fresh`` newer ones.
    """
    def factory(expired: int, fresh: int = 0, failing=()) -> InMemoryItems:
        records = [
            (f'old-{index}', cutoff - timedelta(minutes=expired - index))
            for index in range(expired)
        ]
        records.extend(
            (f'new-{index}', cutoff + timedelta(minutes=index))
            for index in range(fresh)
        )
        return InMemoryItems(records, failing=failing)

    return factory
