"""Business logic for deleting folders and files.

Paths mean what they mean for a move:

- 'folder' deletes the folder with everything below it.
- 'folder:file' takes the file out of that folder only. The file itself
  is deleted once no folder holds it anymore.
- ':file' deletes the file from every folder at once.

A folder is only deleted when it ended up empty, so a child that could
not be deleted keeps its ancestors alive.
"""

import logging
from collections.abc import Iterable
from typing import final

from server.apps.filemanager.exceptions import PermissionDeniedError
from server.apps.filemanager.logic.batch import BatchOperation
from server.apps.filemanager.logic.hierarchy import Path
from server.apps.filemanager.logic.job_status import progress_level

logger = logging.getLogger(__name__)


@final
class DeletePlanner(BatchOperation):
    """Deletes documents through a storage port."""

    def plan(self, paths: Iterable[Path]) -> bool:
        """Delete the given paths.

        Args:
            paths: Folders and files to delete, processed in this order.

        Returns:
            True if every item was processed without error.
        """
        sources = self._begin(paths, interactive=False)

        if sources:
            self._process_all(sources, self._delete)
        else:
            self._ignore('Ignoring delete request without paths')

        return self._succeeded()

    def _delete(self, path: Path) -> None:
        self._visited = set()
        if path.leaf_identifier is not None:
            self._delete_file(path.leaf_identifier, path.folder_identifier)
        elif path.folder_identifier is not None:
            self._delete_folder(path.folder_identifier)

    def _delete_folder(self, folder_identifier: str) -> None:
        folder = self._storage.get_folder(folder_identifier)
        if folder is None or not self._first_visit(folder_identifier):
            return

        if not self._storage.can_delete(folder_identifier):
            raise PermissionDeniedError(folder_identifier, 'delete the folder')

        with progress_level(
            self._job,
            len(folder.child_folder_identifiers)
            + len(folder.child_file_identifiers)
            + 1,
        ) as step:
            for child_identifier in folder.child_folder_identifiers:
                self._attempt(self._delete_folder, child_identifier)
                step()

            for child_identifier in folder.child_file_identifiers:
                self._attempt(
                    self._delete_file,
                    child_identifier,
                    folder_identifier,
                )
                step()

            self._attempt(self._delete_if_empty, folder_identifier)
            step()

    def _delete_file(
        self,
        file_identifier: str,
        folder_identifier: str | None,
    ) -> None:
        """Take a file out of one folder, or out of all if None."""
        deleted = self._storage.get_file(file_identifier)
        if deleted is None:
            return

        if folder_identifier is None:
            if not self._storage.can_delete(file_identifier):
                raise PermissionDeniedError(file_identifier, 'delete the file')
            self._storage.delete(file_identifier)
            logger.info('Deleted file [%s]', file_identifier)
            return

        if folder_identifier not in deleted.parent_identifiers:
            return

        # Detaching changes the file, removing the last parent deletes it
        if deleted.parent_identifiers == {folder_identifier}:
            allowed = self._storage.can_delete(file_identifier)
        else:
            allowed = self._storage.can_edit(file_identifier)
        if not allowed:
            raise PermissionDeniedError(file_identifier, 'delete the file')

        self._remove_from_folder(deleted, folder_identifier)
