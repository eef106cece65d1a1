"""Document store backed by the Document and DocumentParent models.

Translates between database rows and the Folder/File values used by
the move logic, and answers permission questions for one user.
"""

import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Final, final

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from server.apps.filemanager.logic.hierarchy import File, Folder
from server.apps.filemanager.models import (
    Document,
    DocumentKind,
    DocumentParent,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

# Django model permissions checked for the current user
_ADD_PERMISSION: Final = 'filemanager.add_document'
_CHANGE_PERMISSION: Final = 'filemanager.change_document'
_DELETE_PERMISSION: Final = 'filemanager.delete_document'


def get_default_drive() -> str:
    """Get the drive used when none is given.

    Returns:
        Drive name from settings or 'Drive'.
    """
    return getattr(settings, 'FILEMANAGER_DEFAULT_DRIVE', 'Drive')


@final
class DocumentStore:
    """Folders and files of one drive, as seen by one user.

    Every method hits the database; nothing is cached between calls.
    """

    def __init__(self, user: 'User', drive: str | None = None) -> None:
        """Initialize the store.

        Args:
            user: User whose rights are checked and who owns new documents.
            drive: Drive to work in, the default drive if omitted.
        """
        self._user = user
        self._drive = drive or get_default_drive()

    @property
    def drive(self) -> str:
        """Drive this store works in."""
        return self._drive

    def exists(self, identifier: str) -> bool:
        """Check if a folder or file has this identifier.

        Args:
            identifier: Document identifier.

        Returns:
            True if a document exists.
        """
        return self._documents().filter(identifier=identifier).exists()

    def get_folder(self, identifier: str) -> Folder | None:
        """Fetch a folder with its current children.

        Args:
            identifier: Folder identifier.

        Returns:
            Folder, or None if there is no folder with this identifier.
        """
        document = self._find(identifier, DocumentKind.FOLDER)
        if document is None:
            return None

        child_folders = (
            self._documents()
            .filter(
                kind=DocumentKind.FOLDER,
                parent_identifier=identifier,
            )
            .order_by('name', 'identifier')
            .values_list('identifier', flat=True)
        )
        child_files = (
            DocumentParent.objects.filter(
                document__drive=self._drive,
                document__kind=DocumentKind.FILE,
                folder_identifier=identifier,
            )
            .order_by('document__name', 'document__identifier')
            .values_list('document__identifier', flat=True)
        )
        return Folder(
            identifier=document.identifier,
            name=document.name,
            parent_identifier=document.parent_identifier or None,
            child_folder_identifiers=list(child_folders),
            child_file_identifiers=list(child_files),
        )

    def get_file(self, identifier: str) -> File | None:
        """Fetch a file with its parent set.

        Args:
            identifier: File identifier.

        Returns:
            File, or None if there is no file with this identifier.
        """
        document = self._find(identifier, DocumentKind.FILE)
        if document is None:
            return None

        parents = document.parent_links.values_list(
            'folder_identifier',
            flat=True,
        )
        return File(
            identifier=document.identifier,
            name=document.name,
            parent_identifiers=set(parents),
            attachment=document.content.name or '',
        )

    def save(self, entity: Folder | File) -> None:
        """Persist a folder or file, creating it if needed.

        Args:
            entity: Folder or file to save.
        """
        with transaction.atomic():
            if isinstance(entity, Folder):
                self._save_folder(entity)
            else:
                self._save_file(entity)

    def delete(self, identifier: str) -> None:
        """Delete a folder or file.

        File attachments are removed by the post_delete signal.

        Args:
            identifier: Document identifier.
        """
        document = self._documents().filter(identifier=identifier).first()
        if document is None:
            logger.warning(
                'Document not found for delete: %s:%s',
                self._drive,
                identifier,
            )
            return

        with transaction.atomic():
            document.delete()
        logger.info('Document deleted: %s:%s', self._drive, identifier)

    def rename(self, old_identifier: str, new_identifier: str) -> None:
        """Change the identifier of a document.

        Parent links of the document follow it (they reference the row),
        documents pointing at ``old_identifier`` are left untouched.

        Args:
            old_identifier: Current identifier.
            new_identifier: New identifier, must be free.
        """
        with transaction.atomic():
            updated = self._documents().filter(
                identifier=old_identifier,
            ).update(
                identifier=new_identifier,
                modified_at=timezone.now(),
            )

        if updated:
            logger.info(
                'Document renamed: %s:%s -> %s',
                self._drive,
                old_identifier,
                new_identifier,
            )
        else:
            logger.warning(
                'Document not found for rename: %s:%s',
                self._drive,
                old_identifier,
            )

    def can_edit(self, identifier: str) -> bool:
        """Check if the user may change the document.

        For an identifier that is not used yet this checks if the user
        may create a document with it.

        Args:
            identifier: Document identifier.

        Returns:
            True if allowed.
        """
        document = self._documents().filter(identifier=identifier).first()
        if document is None:
            return self._user.has_perm(_ADD_PERMISSION)
        return self._owns(document) and self._user.has_perm(_CHANGE_PERMISSION)

    def can_delete(self, identifier: str) -> bool:
        """Check if the user may delete the document.

        Args:
            identifier: Document identifier.

        Returns:
            True if allowed, False also when the document doesn't exist.
        """
        document = self._documents().filter(identifier=identifier).first()
        if document is None:
            return False
        return self._owns(document) and self._user.has_perm(_DELETE_PERMISSION)

    def _documents(self) -> QuerySet[Document]:
        return Document.objects.filter(drive=self._drive)

    def _find(self, identifier: str, kind: DocumentKind) -> Document | None:
        return self._documents().filter(identifier=identifier, kind=kind).first()

    def _owns(self, document: Document) -> bool:
        return self._user.is_superuser or document.owner_id == self._user.pk

    def _get_or_build(self, identifier: str, kind: DocumentKind) -> Document:
        document = self._find(identifier, kind)
        if document is None:
            document = Document(
                owner=self._user,
                drive=self._drive,
                identifier=identifier,
                kind=kind,
            )
        return document

    def _save_folder(self, folder: Folder) -> None:
        document = self._get_or_build(folder.identifier, DocumentKind.FOLDER)
        document.name = folder.name
        document.parent_identifier = folder.parent_identifier or ''
        document.save()

    def _save_file(self, file_entity: File) -> None:
        document = self._get_or_build(file_entity.identifier, DocumentKind.FILE)
        parents = file_entity.parent_identifiers
        document.name = file_entity.name
        document.parent_identifier = _primary_parent(
            document.parent_identifier,
            parents,
        )
        copied = document.pk is None and bool(file_entity.attachment)
        if copied:
            _copy_attachment(document, file_entity.attachment)
        try:
            document.save()
        except Exception:
            if copied:
                logger.exception(
                    'Document save failed, deleting copied attachment: %s',
                    document.content.name,
                )
                document.content.storage.delete(document.content.name)
            raise

        current = set(
            document.parent_links.values_list('folder_identifier', flat=True),
        )
        document.parent_links.filter(
            folder_identifier__in=current - parents,
        ).delete()
        DocumentParent.objects.bulk_create(
            DocumentParent(document=document, folder_identifier=parent)
            for parent in sorted(parents - current)
        )


def _primary_parent(current: str, parents: set[str]) -> str:
    """Pick the parent shown when a file is displayed in a single place.

    Args:
        current: Primary parent stored so far.
        parents: Full parent set of the file.

    Returns:
        ``current`` if still a parent, else the smallest parent, else ''.
    """
    if current in parents:
        return current
    return min(parents, default='')


def _copy_attachment(document: Document, source_key: str) -> None:
    """Give a new document its own copy of an existing attachment.

    Every file owns its bytes, so deleting one copy never touches the
    content of another.

    Args:
        document: Unsaved document receiving the attachment.
        source_key: Storage key of the attachment to copy.
    """
    storage = document.content.storage
    with storage.open(source_key) as source:
        document.content.save(
            PurePosixPath(source_key).name,
            source,
            save=False,
        )
    logger.info(
        'Attachment copied: %s -> %s',
        source_key,
        document.content.name,
    )
