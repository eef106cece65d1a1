"""Database models for file manager app."""

import secrets
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_DRIVE_MAX_LENGTH: Final = 100
IDENTIFIER_MAX_LENGTH: Final = 255
_NAME_MAX_LENGTH: Final = 255
_KIND_MAX_LENGTH: Final = 10

# Random directory per attachment keeps keys stable across renames
_ATTACHMENT_TOKEN_BYTES: Final = 8


def attachment_upload_path(instance: 'Document', filename: str) -> str:
    """Build the storage key of a file attachment.

    Example: ('Drive', 'report.pdf') -> 'Drive/3f2a9c01b4d5e6f7/report.pdf'

    The key never contains the document identifier, so identifier
    renames don't touch the stored bytes.

    Args:
        instance: Document the attachment belongs to.
        filename: Original filename of the upload.

    Returns:
        Storage key for the attachment.
    """
    token = secrets.token_hex(_ATTACHMENT_TOKEN_BYTES)
    return f'{instance.drive}/{token}/{filename}'


class DocumentKind(models.TextChoices):
    """What a document represents in the hierarchy."""

    FOLDER = 'folder', 'Folder'
    FILE = 'file', 'File'


@final
class Document(models.Model):
    """Folder or file stored as a document of a drive.

    Documents are addressed by identifier, which is unique within a
    drive. Relations point at identifiers, not primary keys: a folder
    stores its parent identifier, a file stores its parents as
    DocumentParent rows. Renaming an identifier therefore keeps the
    document's own relations but leaves other documents pointing at
    the old identifier until they are updated.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='documents',
        db_index=True,
    )

    drive = models.CharField(
        max_length=_DRIVE_MAX_LENGTH,
        help_text='Scope in which identifiers are unique',
    )

    identifier = models.CharField(
        max_length=IDENTIFIER_MAX_LENGTH,
        help_text='Address of the document within its drive',
    )

    kind = models.CharField(
        max_length=_KIND_MAX_LENGTH,
        choices=DocumentKind.choices,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Display name, independent of the identifier',
    )

    parent_identifier = models.CharField(
        max_length=IDENTIFIER_MAX_LENGTH,
        blank=True,
        default='',
        help_text=(
            'Parent folder. For files this is only the primary parent '
            'used for display, see DocumentParent for the full set.'
        ),
    )

    content = models.FileField(
        upload_to=attachment_upload_path,
        blank=True,
        help_text='Attachment bytes (files only)',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Document'  # type: ignore[mutable-override]
        verbose_name_plural = 'Documents'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['drive', 'identifier']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize child folder listing
            models.Index(
                fields=['drive', 'kind', 'parent_identifier'],
                name='documents_drive_parent_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=['drive', 'identifier'],
                name='documents_drive_identifier_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.drive}:{self.identifier}'

    @property
    def is_folder(self) -> bool:
        """Check if the document is a folder."""
        return self.kind == DocumentKind.FOLDER


@final
class DocumentParent(models.Model):
    """Membership of a file in one of its parent folders.

    A file can live in several folders at once, one row per folder.
    """

    document = models.ForeignKey(
        Document,
        on_delete=models.CASCADE,
        related_name='parent_links',
    )

    folder_identifier = models.CharField(
        max_length=IDENTIFIER_MAX_LENGTH,
        db_index=True,
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'Document Parent'  # type: ignore[mutable-override]
        verbose_name_plural = 'Document Parents'  # type: ignore[mutable-override]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=['document', 'folder_identifier'],
                name='document_parents_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.document} in {self.folder_identifier}'
