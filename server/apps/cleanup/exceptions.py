"""Exceptions for cleanup app."""

from collections.abc import Sequence


class CleanupError(Exception):
    """Raised when one or more cleaners could not complete their run."""

    def __init__(self, failed: Sequence[str]) -> None:
        """Initialize CleanupError.

        Args:
            failed: Names of the cleaners that failed.
        """
        self.failed = tuple(failed)
        super().__init__(f'Cleanup failed for: {", ".join(self.failed)}')
