"""Retention cleanup settings."""

from server.settings.components import config

# Records older than this are removed by ``cleanup_expired``
CLEANUP_RETENTION_DAYS = config('CLEANUP_RETENTION_DAYS', cast=int, default=5)

# Number of expired records fetched and deleted per page
CLEANUP_PAGE_SIZE = config('CLEANUP_PAGE_SIZE', cast=int, default=100)
