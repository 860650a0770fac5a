"""Tests for the generic paginated retention cleaner."""

import logging

import pytest

from server.apps.cleanup.logic.retention import RetentionCleaner


def test_execute_deletes_all_expired(make_items, cutoff):
    """Test every expired item is deleted and fresh ones are kept."""
    items = make_items(expired=7, fresh=3)

    deleted = RetentionCleaner(items, page_size=3).execute(cutoff)

    assert deleted == 7
    assert [name for name, _ in items.items] == ['new-0', 'new-1', 'new-2']


def test_execute_fetches_ceil_pages(make_items, cutoff):
    """Test N expired items take ceil(N / page size) page fetches."""
    items = make_items(expired=250)

    RetentionCleaner(items, page_size=100).execute(cutoff)

    assert items.fetched_pages == [100, 100, 50]


def test_execute_exact_page_multiple(make_items, cutoff):
    """Test no extra fetch when items fill the last page exactly."""
    items = make_items(expired=200)

    RetentionCleaner(items, page_size=100).execute(cutoff)

    assert items.fetched_pages == [100, 100]


def test_execute_nothing_expired(make_items, cutoff):
    """Test no page is fetched when nothing is expired."""
    items = make_items(expired=0, fresh=5)

    assert RetentionCleaner(items, page_size=100).execute(cutoff) == 0
    assert items.fetched_pages == []


def test_execute_tolerates_failed_deletes(make_items, cutoff, caplog):
    """Test 250 records with 5 locked ones: 245 deleted, 5 warnings."""
    failing = [f'old-{index}' for index in range(245, 250)]
    items = make_items(expired=250, failing=failing)

    with caplog.at_level(logging.WARNING):
        deleted = RetentionCleaner(items, page_size=100).execute(cutoff)

    assert deleted == 245
    assert items.fetched_pages == [100, 100, 50]
    warnings = [
        record for record in caplog.records
        if record.levelno == logging.WARNING
    ]
    assert len(warnings) == 5
    assert {record.getMessage() for record in warnings} == {
        f'Could not delete record {name}' for name in failing
    }
    assert all(record.exc_info for record in warnings)


def test_execute_counts_only_successful_deletes(make_items, cutoff):
    """Test failures are excluded from the reported count."""
    items = make_items(expired=10, failing=['old-8', 'old-9'])

    assert RetentionCleaner(items, page_size=4).execute(cutoff) == 8


def test_execute_skips_items_already_gone(make_items, cutoff):
    """Test items deleted by somebody else are not counted."""
    items = make_items(expired=3)
    delete_one = items.delete_one

    def delete_concurrently(item):
        items.items.remove(item)
        return delete_one(item)

    items.delete_one = delete_concurrently

    assert RetentionCleaner(items, page_size=10).execute(cutoff) == 0


def test_execute_is_idempotent(make_items, cutoff):
    """Test a second run with nothing newly expired deletes nothing."""
    items = make_items(expired=120, fresh=2)
    cleaner = RetentionCleaner(items, page_size=50)

    assert cleaner.execute(cutoff) == 120
    assert cleaner.execute(cutoff) == 0
    assert items.fetched_pages == [50, 50, 20]


def test_execute_resumes_after_partial_run(make_items, cutoff):
    """Test a rerun only sees items still expired."""
    items = make_items(expired=10, failing=['old-0', 'old-1'])

    assert RetentionCleaner(items, page_size=100).execute(cutoff) == 8

    items.failing.clear()
    assert RetentionCleaner(items, page_size=100).execute(cutoff) == 2
    assert items.items == []


def test_execute_count_failure_propagates(make_items, cutoff):
    """Test a counting fault aborts the run."""
    items = make_items(expired=3)

    def broken_count(cutoff):
        raise ConnectionError('database gone')

    items.count = broken_count

    with pytest.raises(ConnectionError):
        RetentionCleaner(items).execute(cutoff)


def test_execute_fetch_failure_propagates(make_items, cutoff):
    """Test a page fetch fault aborts the run."""
    items = make_items(expired=3)

    def broken_fetch(cutoff, page_size):
        raise ConnectionError('database gone')

    items.fetch_page = broken_fetch

    with pytest.raises(ConnectionError):
        RetentionCleaner(items).execute(cutoff)


def test_default_page_size_from_settings(make_items, settings):
    """Test page size defaults to the configured value."""
    settings.CLEANUP_PAGE_SIZE = 42

    assert RetentionCleaner(make_items(expired=0)).page_size == 42


def test_invalid_page_size(make_items):
    """Test page size must be positive."""
    with pytest.raises(ValueError, match='must be positive'):
        RetentionCleaner(make_items(expired=0), page_size=0)
