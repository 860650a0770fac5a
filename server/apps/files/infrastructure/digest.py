"""Content digest calculation for uploaded files."""

import hashlib
from typing import TYPE_CHECKING, BinaryIO, Final

from server.apps.files.exceptions import DigestComputationError

if TYPE_CHECKING:
    from hashlib import _Hash

_CHUNK_SIZE: Final = 8192  # 8KB chunks for digest calculation


def _new_hash(algorithm: str) -> '_Hash':
    try:
        return hashlib.new(algorithm)
    except ValueError as error:
        raise DigestComputationError(
            f'Unsupported digest algorithm: {algorithm}',
        ) from error


def compute_digest(stream: BinaryIO, algorithm: str) -> tuple[int, str]:
    """Calculate size and digest of a stream.

    The stream is read exactly once, from its current position to the
    end, in chunks to handle large files efficiently. It is not rewound.

    Args:
        stream: Readable binary stream.
        algorithm: Any algorithm name accepted by ``hashlib.new``.

    Returns:
        Tuple of content size in bytes and hex-encoded digest.

    Raises:
        DigestComputationError: If the algorithm is unknown or the
            stream cannot be read to the end.
    """
    return _digest_chunks(stream, algorithm, target=None)


def copy_with_digest(
    source: BinaryIO,
    target: BinaryIO,
    algorithm: str,
) -> tuple[int, str]:
    """Copy a stream while calculating its size and digest.

    Used to stage an upload to a local file in a single pass.

    Args:
        source: Readable binary stream, consumed once.
        target: Writable binary stream receiving every chunk.
        algorithm: Any algorithm name accepted by ``hashlib.new``.

    Returns:
        Tuple of content size in bytes and hex-encoded digest.

    Raises:
        DigestComputationError: If the algorithm is unknown or the
            content cannot be read or written.
    """
    return _digest_chunks(source, algorithm, target=target)


def _digest_chunks(
    source: BinaryIO,
    algorithm: str,
    target: BinaryIO | None,
) -> tuple[int, str]:
    content_hash = _new_hash(algorithm)
    size = 0
    try:
        for chunk in iter(lambda: source.read(_CHUNK_SIZE), b''):
            content_hash.update(chunk)
            size += len(chunk)
            if target is not None:
                target.write(chunk)
    except OSError as error:
        raise DigestComputationError(
            f'Failed to read content for {algorithm} digest',
        ) from error
    return size, content_hash.hexdigest()
