"""Django storage configuration for the S3-compatible object store.

This module configures django-storages to work with:
- MinIO for local development
- Any S3-compatible service in production

Blobs live in exactly two buckets derived from one base name:
``<base>-working`` (staging) and ``<base>-stable`` (released).
"""

from typing import Any, Final

from server.settings.components import config

# Both managed bucket names are derived from this value
BLOB_BUCKET_BASE_NAME: Final = config(
    'BLOB_BUCKET_BASE_NAME',
    default='calcpad-storage',
)

# Turn native object versioning on when buckets are bootstrapped
BLOB_VERSIONING_ENABLED: Final = config(
    'BLOB_VERSIONING_ENABLED',
    cast=bool,
    default=True,
)

# Storage configuration dictionary
# The default storage only carries credentials and endpoint,
# every blob operation names its bucket explicitly.
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.blobs.infrastructure.storage.BlobStorage',
        'OPTIONS': {
            'bucket_name': '{0}-working'.format(BLOB_BUCKET_BASE_NAME),
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': True,  # Re-upload creates a new version
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
