"""Fixtures shared by all app tests."""

import boto3
import pytest
from django.conf import settings
from moto import mock_aws


@pytest.fixture
def bucket_name() -> str:
    """Name of the bucket configured for the default storage."""
    return settings.STORAGES['default']['OPTIONS']['bucket_name']


@pytest.fixture
def mock_s3(bucket_name):
    """Mock S3 service with the artifacts bucket.

    Yields:
        boto3 Bucket resource for the configured bucket.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=bucket_name)

        yield conn.Bucket(bucket_name)
