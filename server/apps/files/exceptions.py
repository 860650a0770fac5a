"""Exceptions for files app."""


class FileStorageError(Exception):
    """Raised when the metadata store or the blob store fails.

    The underlying fault is always chained as ``__cause__``.
    """


class FileEntryNotFoundError(FileStorageError):
    """Raised when a file has no metadata row for the given space and id."""

    def __init__(self, space: str, file_id: str) -> None:
        """Initialize FileEntryNotFoundError.

        Args:
            space: Space the file was looked up in.
            file_id: Id of the missing file.
        """
        self.space = space
        self.file_id = file_id
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f'File {self.file_id} not found in space {self.space}'


class FileContentNotFoundError(FileEntryNotFoundError):
    """Raised when the blob for a file does not exist in the blob store.

    Callers reading content concurrently with deletes should treat this
    as a normal, retriable outcome.
    """

    def _describe(self) -> str:
        return (
            f'Content of file {self.file_id} not found '
            f'in space {self.space}'
        )


class DigestComputationError(FileStorageError):
    """Raised when upload content cannot be fully read and hashed."""
