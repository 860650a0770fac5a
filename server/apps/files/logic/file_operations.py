"""Business logic for file operations.

File metadata lives in the database (``FileEntry`` rows) and file content
lives in the blob store. There is no transaction spanning both, so every
operation touches them in a fixed order chosen so that the only
inconsistency a crash can leave behind is content without metadata
(an orphan blob, invisible to readers):

- uploads store the content first, then insert the metadata row;
- deletes remove the content first, then the metadata row.

Metadata rows whose content has gone missing anyway are removed only by
``delete_file_entries_without_content``, never implicitly by reads.
"""

import logging
import uuid
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, TypeVar

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import DatabaseError
from django.utils import timezone

from server.apps.files.exceptions import (
    FileEntryNotFoundError,
    FileStorageError,
)
from server.apps.files.infrastructure.uploads import (
    FileInfo,
    describe_local_file,
    remove_staged_file,
    stage_stream,
)
from server.apps.files.models import FileEntry

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileContentStorage

logger = logging.getLogger(__name__)

_T = TypeVar('_T')


def _get_storage() -> 'FileContentStorage':
    """Get the configured default storage backend.

    Returns:
        FileContentStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


@contextmanager
def _metadata_errors(message: str) -> Iterator[None]:
    """Re-raise database faults as ``FileStorageError``."""
    try:
        yield
    except DatabaseError as error:
        logger.exception(message)
        raise FileStorageError(message) from error


def add_file(
    space: str,
    namespace: str | None,
    name: str,
    stream: BinaryIO,
) -> FileEntry:
    """Upload a new file from a stream.

    The stream is staged to a temporary local file while its size and
    digest are computed, then closed. The temporary file is removed once
    the upload is over, whatever its outcome.

    Args:
        space: Space the file belongs to.
        namespace: Namespace within the space, may be None.
        name: Display name of the file.
        stream: Upload content, consumed once.

    Returns:
        Persisted FileEntry.

    Raises:
        DigestComputationError: If the stream cannot be read or hashed.
        FileStorageError: If storing content or metadata fails.
    """
    try:
        file_info = stage_stream(
            stream,
            settings.FILES_DIGEST_ALGORITHM,
            temp_dir=settings.FILES_UPLOAD_TEMP_DIR,
        )
    finally:
        stream.close()

    try:
        return _store_file(space, namespace, name, file_info)
    finally:
        remove_staged_file(file_info.path)


def add_existing_file(
    space: str,
    namespace: str | None,
    name: str,
    path: Path,
) -> FileEntry:
    """Upload a new file from existing local content, read in place.

    Args:
        space: Space the file belongs to.
        namespace: Namespace within the space, may be None.
        name: Display name of the file.
        path: Local file with the content. Left untouched.

    Returns:
        Persisted FileEntry.

    Raises:
        DigestComputationError: If the file cannot be read or hashed.
        FileStorageError: If the file does not exist or storing fails.
    """
    file_info = describe_local_file(path, settings.FILES_DIGEST_ALGORITHM)
    return _store_file(space, namespace, name, file_info)


def _store_file(
    space: str,
    namespace: str | None,
    name: str,
    file_info: FileInfo,
) -> FileEntry:
    file_entry = FileEntry(
        id=str(uuid.uuid4()),
        space=space,
        namespace=namespace,
        name=name,
        size=file_info.size,
        digest=file_info.digest,
        digest_algorithm=file_info.digest_algorithm,
        modified=timezone.now(),
    )

    # Step 1: Content first, a failure here leaves nothing visible
    try:
        content = file_info.path.open('rb')
    except OSError as error:
        raise FileStorageError(
            f'Could not read file to upload: {name}',
        ) from error
    with content:
        _get_storage().add_file(file_entry, content)

    # Step 2: Metadata. A failure here leaves an orphan blob, which is
    # unreachable without its metadata row and deliberately not rolled back.
    with _metadata_errors(f'Failed to store metadata of file {file_entry.id}'):
        file_entry.save(force_insert=True)

    logger.info(
        'Stored file %s (%s, %d bytes) in space %s',
        file_entry.id,
        name,
        file_entry.size,
        space,
    )
    return file_entry


def get_file(space: str, file_id: str) -> FileEntry:
    """Get metadata of a file.

    Does not check that the content exists.

    Args:
        space: Space of the file.
        file_id: Id of the file.

    Returns:
        FileEntry instance.

    Raises:
        FileEntryNotFoundError: If there is no such file.
        FileStorageError: If the query fails.
    """
    with _metadata_errors(f'Failed to get file {file_id}'):
        file_entry = FileEntry.objects.for_file(space, file_id).first()
    if file_entry is None:
        raise FileEntryNotFoundError(space, file_id)
    return file_entry


def list_files(space: str, namespace: str | None) -> list[FileEntry]:
    """List metadata of all files in a space and namespace.

    Args:
        space: Space of the files.
        namespace: Namespace of the files, None for files without one.

    Returns:
        FileEntry instances, in no particular order.

    Raises:
        FileStorageError: If the query fails.
    """
    with _metadata_errors(
        f'Failed to list files in space {space}, namespace {namespace}',
    ):
        return list(FileEntry.objects.for_space_and_namespace(space, namespace))


def process_file_content(
    space: str,
    file_id: str,
    processor: Callable[[BinaryIO], _T],
) -> _T:
    """Run ``processor`` on the content of a file and return its result.

    The content stream is closed however ``processor`` exits.

    Args:
        space: Space of the file.
        file_id: Id of the file.
        processor: Callable receiving the open content stream.

    Returns:
        Whatever ``processor`` returns.

    Raises:
        FileContentNotFoundError: If the content does not exist.
        FileStorageError: If reading from storage fails.
    """
    return _get_storage().process_file_content(space, file_id, processor)


def consume_file_content(
    space: str,
    file_id: str,
    consumer: Callable[[BinaryIO], object],
) -> None:
    """Pass the content of a file to ``consumer``, ignoring its result."""
    process_file_content(space, file_id, consumer)


def delete_file(space: str, file_id: str) -> bool:
    """Delete content and metadata of a file.

    Args:
        space: Space of the file.
        file_id: Id of the file.

    Returns:
        True if a metadata row was removed.

    Raises:
        FileStorageError: If either deletion fails.
    """
    _get_storage().delete_file(space, file_id)
    with _metadata_errors(f'Failed to delete metadata of file {file_id}'):
        deleted, _ = FileEntry.objects.for_file(space, file_id).delete()
    logger.info('Deleted file %s from space %s', file_id, space)
    return deleted > 0


def delete_by_space_and_namespace(space: str, namespace: str | None) -> int:
    """Delete all files in a space and namespace.

    Returns:
        Number of removed metadata rows.
    """
    _get_storage().delete_files_by_space_and_namespace(space, namespace)
    with _metadata_errors(
        f'Failed to delete files in space {space}, namespace {namespace}',
    ):
        deleted, _ = FileEntry.objects.for_space_and_namespace(
            space,
            namespace,
        ).delete()
    return deleted


def delete_by_spaces(spaces: Iterable[str]) -> int:
    """Delete all files in the given spaces.

    Returns:
        Number of removed metadata rows.
    """
    spaces = list(spaces)
    _get_storage().delete_files_by_spaces(spaces)
    with _metadata_errors(f'Failed to delete files in spaces {spaces}'):
        deleted, _ = FileEntry.objects.for_spaces(spaces).delete()
    return deleted


def delete_modified_before(cutoff: datetime) -> int:
    """Delete all files created before ``cutoff``.

    Content is matched by the entry's ``modified`` time stored with the
    blob, so a retained row never loses its content.

    Args:
        cutoff: Timezone aware time limit (exclusive).

    Returns:
        Number of removed metadata rows.

    Raises:
        FileStorageError: If either deletion fails.
    """
    _get_storage().delete_files_modified_before(cutoff)
    with _metadata_errors(
        f'Failed to delete files modified before {cutoff.isoformat()}',
    ):
        deleted, _ = FileEntry.objects.modified_before(cutoff).delete()
    logger.info('Deleted %d files modified before %s', deleted, cutoff)
    return deleted


def delete_file_entries_without_content() -> int:
    """Remove metadata rows whose content is missing from storage.

    This is the reconciliation sweep. It only ever removes metadata: content
    without metadata is left alone.

    Returns:
        Number of removed metadata rows.

    Raises:
        FileStorageError: If listing or deleting fails.
    """
    with _metadata_errors('Failed to list all files'):
        entries = list(FileEntry.objects.all())

    missing = _get_storage().get_entries_without_content(entries)
    if not missing:
        return 0

    for file_entry in missing:
        logger.warning(
            'Content of file %s is missing in space %s, removing its entry',
            file_entry.id,
            file_entry.space,
        )

    with _metadata_errors('Failed to delete file entries without content'):
        deleted, _ = FileEntry.objects.for_entries(missing).delete()
    return deleted
