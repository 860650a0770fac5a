"""Tests for content digest calculation."""

import hashlib
from io import BytesIO

import pytest

from server.apps.files.exceptions import (
    DigestComputationError,
    FileStorageError,
)
from server.apps.files.infrastructure.digest import (
    compute_digest,
    copy_with_digest,
)


class _BrokenStream(BytesIO):
    def read(self, size=-1):
        raise OSError('disk on fire')


def test_compute_digest_sha1():
    """Test size and SHA-1 digest of a stream."""
    content = b'test content'

    size, digest = compute_digest(BytesIO(content), 'sha1')

    assert size == len(content)
    assert digest == hashlib.sha1(content).hexdigest()  # noqa: S324


def test_compute_digest_large_stream():
    """Test content spanning many read chunks."""
    content = b'x' * 100_000

    size, digest = compute_digest(BytesIO(content), 'sha256')

    assert size == 100_000
    assert digest == hashlib.sha256(content).hexdigest()


def test_compute_digest_empty_stream():
    """Test empty content."""
    size, digest = compute_digest(BytesIO(), 'md5')

    assert size == 0
    assert digest == hashlib.md5(b'').hexdigest()  # noqa: S324


@pytest.mark.parametrize('algorithm', ['md5', 'sha1', 'sha256', 'sha512'])
def test_compute_digest_hashlib_algorithms(algorithm):
    """Test any hashlib algorithm name is accepted."""
    content = b'test content'

    _, digest = compute_digest(BytesIO(content), algorithm)

    assert digest == hashlib.new(algorithm, content).hexdigest()


def test_compute_digest_unknown_algorithm():
    """Test unknown algorithm raises DigestComputationError."""
    with pytest.raises(DigestComputationError, match='Unsupported'):
        compute_digest(BytesIO(b'content'), 'no-such-hash')


def test_compute_digest_read_failure():
    """Test read errors become DigestComputationError."""
    with pytest.raises(DigestComputationError) as exc_info:
        compute_digest(_BrokenStream(), 'sha1')

    # Digest faults are storage faults too
    assert isinstance(exc_info.value, FileStorageError)
    assert isinstance(exc_info.value.__cause__, OSError)


def test_copy_with_digest():
    """Test content is copied while being hashed."""
    content = b'copy me' * 5000
    target = BytesIO()

    size, digest = copy_with_digest(BytesIO(content), target, 'sha1')

    assert target.getvalue() == content
    assert size == len(content)
    assert digest == hashlib.sha1(content).hexdigest()  # noqa: S324
