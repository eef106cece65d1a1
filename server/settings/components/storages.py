"""Django storage configuration for document attachments.

File contents are kept in an S3-compatible bucket through django-storages:
- MinIO for local development
- Any S3-compatible service in production

The document store itself (identifiers, names, parent links) lives in
the database, only the attachment bytes go to the bucket.
"""

from typing import Any, Final

from server.settings.components import config

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': (
            'server.apps.filemanager.infrastructure.storage.AttachmentStorage'
        ),
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='file-manager',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default='testing'),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default='testing'),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': False,  # Renames never clobber attachments
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
