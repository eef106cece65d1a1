"""Custom storage backend for document attachments."""

import logging
from typing import Any, final, override

from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@final
class AttachmentStorage(S3Storage):
    """S3 storage backend for file attachments.

    Extends django-storages S3Storage with logging of every write and
    delete, so attachment lifecycle can be followed next to the
    document operations that caused it.
    """

    @override
    def save(
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save attachment to S3 with error handling and logging.

        Args:
            name: Storage key for the attachment.
            content: File content (file-like object).
            max_length: Optional maximum length for the key.

        Returns:
            Actual storage key used (may differ from name if taken).

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading attachment: %s', name)
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Failed to upload attachment: %s', name)
            raise
        else:
            logger.info('Uploaded attachment: %s', saved_name)
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete attachment from S3 with error handling and logging.

        Args:
            name: Storage key of the attachment.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting attachment: %s', name)
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete attachment: %s', name)
            raise
        else:
            logger.info('Deleted attachment: %s', name)
