"""Tests for local staging of upload content."""

import hashlib
from io import BytesIO

import pytest

from server.apps.files.exceptions import (
    DigestComputationError,
    FileStorageError,
)
from server.apps.files.infrastructure.uploads import (
    describe_local_file,
    remove_staged_file,
    stage_stream,
)


class _FailingStream(BytesIO):
    def read(self, size=-1):
        if self.tell() > 0:
            raise OSError('connection reset')
        return super().read(4)


def test_stage_stream(tmp_path):
    """Test stream is copied to a temp file with size and digest."""
    content = b'staged content'

    file_info = stage_stream(BytesIO(content), 'sha1', temp_dir=str(tmp_path))

    assert file_info.is_temporary
    assert file_info.path.parent == tmp_path
    assert file_info.path.read_bytes() == content
    assert file_info.size == len(content)
    assert file_info.digest == hashlib.sha1(content).hexdigest()  # noqa: S324
    assert file_info.digest_algorithm == 'sha1'


def test_stage_stream_failure_removes_temp_file(tmp_path):
    """Test failed staging leaves no temp file behind."""
    with pytest.raises(DigestComputationError):
        stage_stream(_FailingStream(b'12345678'), 'sha1', temp_dir=str(tmp_path))

    assert list(tmp_path.iterdir()) == []


def test_stage_stream_missing_temp_dir(tmp_path):
    """Test unusable temp dir raises FileStorageError."""
    missing_dir = tmp_path / 'missing'

    with pytest.raises(FileStorageError, match='temporary file'):
        stage_stream(BytesIO(b'content'), 'sha1', temp_dir=str(missing_dir))


def test_describe_local_file(tmp_path):
    """Test existing file is described in place."""
    local_file = tmp_path / 'app.zip'
    local_file.write_bytes(b'archive')

    file_info = describe_local_file(local_file, 'sha256')

    assert file_info.path == local_file
    assert not file_info.is_temporary
    assert file_info.size == 7
    assert file_info.digest == hashlib.sha256(b'archive').hexdigest()


def test_describe_local_file_missing(tmp_path):
    """Test missing local file raises FileStorageError."""
    with pytest.raises(FileStorageError, match='Could not find file'):
        describe_local_file(tmp_path / 'missing.zip', 'sha1')


def test_remove_staged_file(tmp_path):
    """Test temp file removal."""
    staged = tmp_path / 'upload-1'
    staged.write_bytes(b'content')

    remove_staged_file(staged)

    assert not staged.exists()


def test_remove_staged_file_failure_is_logged(tmp_path, caplog):
    """Test removal failure is logged, not raised."""
    # A non-empty directory cannot be unlinked
    blocker = tmp_path / 'upload-dir'
    blocker.mkdir()
    (blocker / 'inner').write_bytes(b'x')

    remove_staged_file(blocker)

    assert blocker.exists()
    assert 'Failed to remove temporary upload file' in caplog.text
