"""Shared fixtures for files app tests."""

import hashlib
import uuid
from io import BytesIO

import pytest
from django.utils import timezone

from server.apps.files.logic.file_operations import add_file
from server.apps.files.models import FileEntry


@pytest.fixture
def payload() -> bytes:
    """1024 bytes of sample archive content."""
    return bytes(range(256)) * 4


@pytest.fixture
def stored_file(db, mock_s3, payload):
    """Upload ``payload`` as app.zip to space S1, namespace NS.

    Returns:
        Persisted FileEntry.
    """
    return add_file('S1', 'NS', 'app.zip', BytesIO(payload))


@pytest.fixture
def make_entry(db):
    """Factory for metadata rows without any content in storage.

    Returns:
        Callable creating FileEntry rows.
    """
    def factory(
        space: str = 'S1',
        namespace: str | None = 'NS',
        name: str = 'app.zip',
        modified=None,
    ) -> FileEntry:
        content = name.encode()
        return FileEntry.objects.create(
            id=str(uuid.uuid4()),
            space=space,
            namespace=namespace,
            name=name,
            size=len(content),
            digest=hashlib.sha1(content).hexdigest(),  # noqa: S324
            digest_algorithm='sha1',
            modified=modified or timezone.now(),
        )

    return factory
