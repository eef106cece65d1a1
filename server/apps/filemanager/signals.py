"""Signal handlers for file manager app."""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.filemanager.models import Document

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Document)
def delete_attachment_from_storage(
    sender: type[Document],
    instance: Document,
    **kwargs: object,
) -> None:
    """Delete the attachment when its Document record is deleted.

    A file document is only deleted once it has no parent folder left,
    so this is the single place where file content gets destroyed.

    Args:
        sender: The Document model class.
        instance: The Document instance being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.content:
        return

    storage_name = instance.content.name
    storage = instance.content.storage
    logger.info(
        'Deleting attachment after document delete: %s (%s)',
        storage_name,
        instance,
    )

    try:
        if storage.exists(storage_name):
            storage.delete(storage_name)
        else:
            logger.warning(
                'Attachment not found in storage (already deleted?): %s',
                storage_name,
            )
    except Exception:
        # DB delete already succeeded, the orphan can be purged later
        logger.exception(
            'Failed to delete attachment from storage (orphaned): %s',
            storage_name,
        )
