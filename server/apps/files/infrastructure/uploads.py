"""Local staging of upload content.

An upload is digested before anything is written to the stores. Streams
can only be read once, so they are copied to a temporary local file while
the digest is computed; existing local files are digested in place.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from server.apps.files.exceptions import FileStorageError
from server.apps.files.infrastructure.digest import (
    compute_digest,
    copy_with_digest,
)

logger = logging.getLogger(__name__)

_TEMP_FILE_PREFIX = 'upload-'


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Local file content with its computed size and digest."""

    path: Path
    size: int
    digest: str
    digest_algorithm: str
    is_temporary: bool = False


def stage_stream(
    stream: BinaryIO,
    algorithm: str,
    temp_dir: str | None = None,
) -> FileInfo:
    """Copy a stream to a temporary file, computing its digest.

    The temporary file is removed again if staging fails.

    Args:
        stream: Upload content, consumed once.
        algorithm: Digest algorithm name.
        temp_dir: Directory for the temporary file, system default if None.

    Returns:
        FileInfo pointing at the temporary copy.

    Raises:
        DigestComputationError: If the stream cannot be read or hashed.
        FileStorageError: If the temporary file cannot be created.
    """
    try:
        fd, temp_name = tempfile.mkstemp(prefix=_TEMP_FILE_PREFIX, dir=temp_dir)
    except OSError as error:
        raise FileStorageError(
            'Failed to create temporary file for upload',
        ) from error

    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, 'wb') as temp_file:
            size, digest = copy_with_digest(stream, temp_file, algorithm)
    except Exception:
        remove_staged_file(temp_path)
        raise

    logger.debug('Staged upload to %s (%d bytes)', temp_path, size)
    return FileInfo(
        path=temp_path,
        size=size,
        digest=digest,
        digest_algorithm=algorithm,
        is_temporary=True,
    )


def describe_local_file(path: Path, algorithm: str) -> FileInfo:
    """Compute size and digest of an existing local file in place.

    Args:
        path: Local file to describe.
        algorithm: Digest algorithm name.

    Returns:
        FileInfo pointing at the given file.

    Raises:
        FileStorageError: If the file does not exist.
        DigestComputationError: If the file cannot be read or hashed.
    """
    try:
        local_file = path.open('rb')
    except FileNotFoundError as error:
        raise FileStorageError(
            f'Could not find file to upload: {path.name}',
        ) from error
    except OSError as error:
        raise FileStorageError(
            f'Could not open file to upload: {path.name}',
        ) from error

    with local_file:
        size, digest = compute_digest(local_file, algorithm)

    return FileInfo(
        path=path,
        size=size,
        digest=digest,
        digest_algorithm=algorithm,
    )


def remove_staged_file(path: Path) -> None:
    """Remove a temporary upload file.

    Failures are logged and never raised: the upload itself has already
    succeeded or failed on its own terms by the time this runs.

    Args:
        path: Temporary file to remove.
    """
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning(
            'Failed to remove temporary upload file: %s',
            path,
            exc_info=True,
        )
