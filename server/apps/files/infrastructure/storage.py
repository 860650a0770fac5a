"""Blob store for file content on S3-compatible storage."""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import closing
from datetime import datetime
from typing import TYPE_CHECKING, Any, BinaryIO, Final, TypeVar, final
from urllib.parse import quote, unquote

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError
from storages.backends.s3 import S3Storage
from storages.utils import clean_name

from server.apps.files.exceptions import (
    FileContentNotFoundError,
    FileStorageError,
)

if TYPE_CHECKING:
    from server.apps.files.models import FileEntry

logger = logging.getLogger(__name__)

_T = TypeVar('_T')

# S3 DeleteObjects accepts at most 1000 keys per request
_DELETE_BATCH_SIZE: Final = 1000
_NAMESPACE_METADATA_KEY: Final = 'namespace'
_MODIFIED_METADATA_KEY: Final = 'modified'
_MISSING_KEY_CODES: Final = frozenset(('NoSuchKey', '404', 'NotFound'))

_StorageErrors: Final = (Boto3Error, BotoCoreError, ClientError)


@final
class FileContentStorage(S3Storage):
    """S3 storage backend holding the content of file entries.

    Every blob is stored under ``{space}/{id}`` with the entry's namespace
    and modification time kept as object metadata. Filtering by either
    costs one HEAD request per listed object.

    This class only knows about blobs: it never reads or writes file
    metadata rows, the file operations compose both stores and own the
    ordering between them.

    All boto faults are logged and re-raised as ``FileStorageError``.
    """

    def add_file(self, entry: 'FileEntry', content: BinaryIO) -> None:
        """Upload the content of a file entry.

        Args:
            entry: Entry the content belongs to (not yet persisted).
            content: Readable binary stream with the content.

        Raises:
            FileStorageError: If the upload fails.
        """
        key = self._content_key(entry.space, entry.id)
        metadata = {_MODIFIED_METADATA_KEY: entry.modified.isoformat()}
        if entry.namespace is not None:
            metadata[_NAMESPACE_METADATA_KEY] = quote(entry.namespace)

        try:
            logger.info('Uploading file content to storage: %s', key)
            self.bucket.Object(key).upload_fileobj(
                content,
                ExtraArgs={'Metadata': metadata},
            )
        except _StorageErrors as error:
            logger.exception('Failed to upload file content: %s', key)
            raise FileStorageError(
                f'Failed to upload content of file {entry.id}',
            ) from error
        logger.info('Successfully uploaded file content: %s', key)

    def open_content(self, space: str, file_id: str) -> BinaryIO:
        """Open a read stream for the content of a file.

        The caller owns the returned stream and must close it.

        Args:
            space: Space of the file.
            file_id: Id of the file.

        Returns:
            Streaming body of the blob.

        Raises:
            FileContentNotFoundError: If no blob exists for the file.
            FileStorageError: If the storage request fails.
        """
        key = self._content_key(space, file_id)
        try:
            response = self.bucket.Object(key).get()
        except ClientError as error:
            if _is_missing_key(error):
                raise FileContentNotFoundError(space, file_id) from error
            logger.exception('Failed to open file content: %s', key)
            raise FileStorageError(
                f'Failed to read content of file {file_id}',
            ) from error
        except BotoCoreError as error:
            logger.exception('Failed to open file content: %s', key)
            raise FileStorageError(
                f'Failed to read content of file {file_id}',
            ) from error
        return response['Body']

    def process_file_content(
        self,
        space: str,
        file_id: str,
        processor: Callable[[BinaryIO], _T],
    ) -> _T:
        """Run ``processor`` on the content of a file.

        The stream is closed when the processor returns or raises.
        Exceptions raised by the processor propagate unchanged.

        Args:
            space: Space of the file.
            file_id: Id of the file.
            processor: Callable receiving the open content stream.

        Returns:
            Whatever ``processor`` returns.

        Raises:
            FileContentNotFoundError: If no blob exists for the file.
            FileStorageError: If the storage request fails.
        """
        with closing(self.open_content(space, file_id)) as stream:
            return processor(stream)

    def delete_file(self, space: str, file_id: str) -> None:
        """Delete the content of a file.

        Deleting content that does not exist is a no-op.

        Args:
            space: Space of the file.
            file_id: Id of the file.

        Raises:
            FileStorageError: If the storage request fails.
        """
        key = self._content_key(space, file_id)
        try:
            logger.info('Deleting file content from storage: %s', key)
            self.bucket.Object(key).delete()
        except _StorageErrors as error:
            logger.exception('Failed to delete file content: %s', key)
            raise FileStorageError(
                f'Failed to delete content of file {file_id}',
            ) from error

    def delete_files_by_space_and_namespace(
        self,
        space: str,
        namespace: str | None,
    ) -> int:
        """Delete the content of every file in a space and namespace.

        Args:
            space: Space of the files.
            namespace: Namespace of the files, None for no namespace.

        Returns:
            Number of deleted blobs.

        Raises:
            FileStorageError: If listing or deleting fails.
        """
        return self._delete_matching(
            f'space {space}, namespace {namespace}',
            lambda: (
                summary.key
                for summary in self._list_space(space)
                if self._namespace_of(summary.key) == namespace
            ),
        )

    def delete_files_by_spaces(self, spaces: Iterable[str]) -> int:
        """Delete the content of every file in the given spaces.

        Args:
            spaces: Spaces to clear.

        Returns:
            Number of deleted blobs.

        Raises:
            FileStorageError: If listing or deleting fails.
        """
        spaces = list(spaces)
        return self._delete_matching(
            f'spaces {spaces}',
            lambda: (
                summary.key
                for space in spaces
                for summary in self._list_space(space)
            ),
        )

    def delete_files_modified_before(self, cutoff: datetime) -> int:
        """Delete the content of every file modified before ``cutoff``.

        Compares the entry's ``modified`` time stored with the blob, not
        the object's ``LastModified``, so the result matches the metadata
        query for the same cutoff. Blobs without a stored time are kept.

        Args:
            cutoff: Timezone aware modification time limit (exclusive).

        Returns:
            Number of deleted blobs.

        Raises:
            FileStorageError: If listing or deleting fails.
        """
        def is_expired(key: str) -> bool:
            modified = self._modified_of(key)
            return modified is not None and modified < cutoff

        return self._delete_matching(
            f'modified before {cutoff.isoformat()}',
            lambda: (
                summary.key
                for summary in self._list_prefix(self._prefix())
                if is_expired(summary.key)
            ),
        )

    def get_entries_without_content(
        self,
        entries: Iterable['FileEntry'],
    ) -> list['FileEntry']:
        """Select the entries whose blob does not exist.

        Args:
            entries: File entries to check.

        Returns:
            Entries from ``entries`` with no corresponding blob.

        Raises:
            FileStorageError: If listing the bucket fails.
        """
        entries = list(entries)
        spaces = {entry.space for entry in entries}
        try:
            existing_keys = {
                summary.key
                for space in spaces
                for summary in self._list_space(space)
            }
        except _StorageErrors as error:
            logger.exception('Failed to list file contents')
            raise FileStorageError('Failed to list file contents') from error

        return [
            entry
            for entry in entries
            if self._content_key(entry.space, entry.id) not in existing_keys
        ]

    def _delete_matching(
        self,
        description: str,
        keys: Callable[[], Iterator[str]],
    ) -> int:
        try:
            deleted = self._delete_keys(keys())
        except _StorageErrors as error:
            logger.exception('Failed to delete file contents: %s', description)
            raise FileStorageError(
                f'Failed to delete file contents: {description}',
            ) from error
        logger.info('Deleted %d file contents: %s', deleted, description)
        return deleted

    def _delete_keys(self, keys: Iterator[str]) -> int:
        deleted = 0
        batch: list[dict[str, str]] = []
        for key in keys:
            batch.append({'Key': key})
            if len(batch) == _DELETE_BATCH_SIZE:
                deleted += self._delete_batch(batch)
                batch = []
        if batch:
            deleted += self._delete_batch(batch)
        return deleted

    def _delete_batch(self, batch: list[dict[str, str]]) -> int:
        response = self.bucket.delete_objects(
            Delete={'Objects': batch, 'Quiet': True},
        )
        errors = response.get('Errors', [])
        for error in errors:
            logger.warning(
                'Failed to delete file content %s: %s',
                error.get('Key'),
                error.get('Message'),
            )
        return len(batch) - len(errors)

    def _list_space(self, space: str) -> Iterator[Any]:
        return self._list_prefix(self._prefix(space))

    def _list_prefix(self, prefix: str) -> Iterator[Any]:
        return iter(self.bucket.objects.filter(Prefix=prefix))

    def _metadata_of(self, key: str) -> dict[str, str]:
        return self.bucket.Object(key).metadata or {}

    def _namespace_of(self, key: str) -> str | None:
        namespace = self._metadata_of(key).get(_NAMESPACE_METADATA_KEY)
        if namespace is None:
            return None
        return unquote(namespace)

    def _modified_of(self, key: str) -> datetime | None:
        modified = self._metadata_of(key).get(_MODIFIED_METADATA_KEY)
        if modified is None:
            return None
        try:
            return datetime.fromisoformat(modified)
        except ValueError:
            logger.warning('Invalid modified metadata on %s: %s', key, modified)
            return None

    def _content_key(self, space: str, file_id: str) -> str:
        return self._normalize_name(clean_name(f'{space}/{file_id}'))

    def _prefix(self, space: str | None = None) -> str:
        if space is None:
            return self._normalize_name('')
        return self._content_key(space, '')


def _is_missing_key(error: ClientError) -> bool:
    return error.response.get('Error', {}).get('Code') in _MISSING_KEY_CODES
