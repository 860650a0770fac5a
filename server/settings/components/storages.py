"""Django storage configuration for the blob store.

Uploaded file content lives in an S3-compatible bucket:
- MinIO for local development
- any S3-compatible service in production

Both use the same ``FileContentStorage`` backend.
"""

from typing import Any, Final

from server.settings.components import config

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': (
            'server.apps.files.infrastructure.storage.FileContentStorage'
        ),
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='artifacts',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default='minioadmin'),
            'secret_key': config(
                'AWS_SECRET_ACCESS_KEY',
                default='minioadmin',
            ),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            # Keys are random ids, never rename on collision
            'file_overwrite': True,
            'default_acl': None,  # Inherit bucket ACL
        },
    },
}
