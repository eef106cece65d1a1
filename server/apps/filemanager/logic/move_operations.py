"""Business logic for moving, renaming and merging folders and files.

A move request is a batch of source paths plus a destination path:

- destination is an existing folder without leaf: every source is moved
  into it, keeping its name. Folders with the same name are merged,
  files with the same name are overwritten or skipped.
- exactly one source and a destination with leaf: the source is moved
  to the destination folder (if needed) and renamed to the leaf.

Every item is processed on its own. A failing item is logged and
skipped; items processed before it stay as they are.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, final

from server.apps.filemanager.exceptions import (
    CycleError,
    DestinationMissingError,
    NameCollisionError,
    PermissionDeniedError,
)
from server.apps.filemanager.logic.batch import (
    BatchOperation,
    reserve_identifier,
)
from server.apps.filemanager.logic.hierarchy import File, Folder, Path
from server.apps.filemanager.logic.job_status import progress_level

if TYPE_CHECKING:
    from server.apps.filemanager.logic.ports import (
        IdentifierGenerator,
        JobPort,
        StoragePort,
    )

logger = logging.getLogger(__name__)


@final
class MovePlanner(BatchOperation):
    """Moves, renames and merges documents through a storage port.

    The planner keeps no copy of the hierarchy: every decision re-reads
    the storage and every change is saved right away.
    """

    def __init__(
        self,
        storage: 'StoragePort',
        identifiers: 'IdentifierGenerator',
        job: 'JobPort | None' = None,
    ) -> None:
        """Initialize the planner.

        Args:
            storage: Document storage of the current user.
            identifiers: Source of free identifiers for renames.
            job: Job to report progress to and ask questions through.
        """
        super().__init__(storage, job)
        self._identifiers = identifiers

    def plan(
        self,
        paths: Iterable[Path],
        destination: Path | None,
        *,
        interactive: bool = False,
    ) -> bool:
        """Move or rename the given paths.

        Requests that are neither a bulk move nor a single rename are
        ignored, see ``ignored``.

        Args:
            paths: Folders and files to move, processed in this order.
            destination: Target folder, or target folder and new name.
            interactive: Whether name collisions may be asked to the user.

        Returns:
            True if every item was processed without error.
        """
        sources = self._begin(paths, interactive=interactive)

        if not sources or destination is None:
            self._ignore('Ignoring move request without paths or destination')
        elif self._is_bulk_target(destination):
            self._process_all(
                sources,
                self._move,
                destination.folder_identifier or '',
            )
        elif len(sources) == 1 and destination.leaf_identifier is not None:
            with progress_level(self._job, 1) as step:
                self._attempt(self._rename, sources[0], destination)
                step()
        else:
            self._ignore(
                'Ignoring move request of %d paths to [%s]',
                len(sources),
                destination,
            )

        return self._succeeded()

    def _move(self, path: Path, destination: str) -> None:
        if path.leaf_identifier is not None:
            self._move_file(
                path.leaf_identifier,
                path.folder_identifier,
                destination,
            )
        elif path.folder_identifier is not None:
            self._move_folder(path.folder_identifier, destination)

    def _move_folder(self, folder_identifier: str, new_parent: str) -> None:
        if self._is_descendant_or_self(new_parent, folder_identifier):
            raise CycleError(folder_identifier, new_parent)

        folder = self._storage.get_folder(folder_identifier)
        if folder is None or folder.parent_identifier == new_parent:
            return

        if not self._storage.can_edit(folder_identifier):
            raise PermissionDeniedError(folder_identifier, 'move the folder')

        parent = self._storage.get_folder(new_parent)
        if parent is None:
            raise DestinationMissingError(new_parent)

        sibling = self._child_folder_named(parent, folder.name)
        if sibling is not None:
            self._merge_folders(folder, sibling.identifier)
            return

        folder.parent_identifier = new_parent
        self._storage.save(folder)
        logger.info('Moved folder [%s] to [%s]', folder_identifier, new_parent)

    def _merge_folders(self, source: Folder, destination: str) -> None:
        """Move the content of ``source`` into ``destination``.

        ``source`` is deleted afterwards if nothing was left behind.
        """
        logger.info(
            'Merging folder [%s] into [%s]',
            source.identifier,
            destination,
        )
        child_folders = list(source.child_folder_identifiers)
        child_files = list(source.child_file_identifiers)

        with progress_level(
            self._job,
            len(child_folders) + len(child_files) + 1,
        ) as step:
            for child_identifier in child_folders:
                self._attempt(self._move_folder, child_identifier, destination)
                step()

            for child_identifier in child_files:
                self._attempt(
                    self._move_file,
                    child_identifier,
                    source.identifier,
                    destination,
                )
                step()

            self._attempt(self._delete_if_empty, source.identifier)
            step()

    def _move_file(
        self,
        file_identifier: str,
        old_parent: str | None,
        new_parent: str,
    ) -> None:
        """Replace ``old_parent`` with ``new_parent`` in a file's parents."""
        moved = self._storage.get_file(file_identifier)
        if moved is None or old_parent == new_parent:
            return

        if not self._storage.can_edit(file_identifier):
            raise PermissionDeniedError(file_identifier, 'move the file')

        parent = self._storage.get_folder(new_parent)
        if parent is None:
            raise DestinationMissingError(new_parent)

        if not self._make_room(
            moved.identifier,
            parent,
            moved.name,
            exclude=moved.identifier,
        ):
            return

        self._reparent_file(moved, old_parent, new_parent)
        logger.info(
            'Moved file [%s] from [%s] to [%s]',
            file_identifier,
            old_parent,
            new_parent,
        )

    def _reparent_file(
        self,
        moved: File,
        old_parent: str | None,
        new_parent: str,
    ) -> None:
        changed = old_parent in moved.parent_identifiers
        if old_parent is not None:
            moved.parent_identifiers.discard(old_parent)
        if new_parent not in moved.parent_identifiers:
            moved.parent_identifiers.add(new_parent)
            changed = True
        if changed:
            self._storage.save(moved)

    def _rename(self, path: Path, destination: Path) -> None:
        if path.leaf_identifier is not None:
            self._rename_file(path, destination)
        elif path.folder_identifier is not None:
            self._rename_folder(path.folder_identifier, destination)

    def _rename_folder(self, folder_identifier: str, destination: Path) -> None:
        folder = self._storage.get_folder(folder_identifier)
        if folder is None or destination.leaf_identifier is None:
            return

        if not self._storage.can_delete(folder_identifier):
            raise PermissionDeniedError(folder_identifier, 'rename the folder')

        desired = destination.leaf_identifier
        new_parent = destination.folder_identifier
        if new_parent is None:
            # Without a target folder the parent stays the same
            new_parent = folder.parent_identifier

        if new_parent == folder.parent_identifier and desired == folder_identifier:
            return

        if new_parent is not None:
            self._check_folder_target(folder, new_parent, desired)

        new_identifier = None
        if desired != folder_identifier:
            new_identifier = reserve_identifier(
                self._storage,
                self._identifiers,
                desired,
            )

        if new_parent is not None and folder.parent_identifier != new_parent:
            folder.parent_identifier = new_parent
            self._storage.save(folder)
            logger.info('Moved folder [%s] to [%s]', folder_identifier, new_parent)

        if new_identifier is not None:
            self._change_folder_identifier(folder, new_identifier, desired)

    def _check_folder_target(
        self,
        folder: Folder,
        new_parent: str,
        desired: str,
    ) -> None:
        if self._is_descendant_or_self(new_parent, folder.identifier):
            raise CycleError(folder.identifier, new_parent)

        parent = self._storage.get_folder(new_parent)
        if parent is None:
            raise DestinationMissingError(new_parent)

        sibling = self._child_folder_named(
            parent,
            desired,
            exclude=folder.identifier,
        )
        if sibling is not None:
            raise NameCollisionError(desired, new_parent)

    def _change_folder_identifier(
        self,
        folder: Folder,
        new_identifier: str,
        name: str,
    ) -> None:
        """Rename a folder and re-point its direct children to it."""
        self._change_identifier(folder.identifier, new_identifier)

        renamed = self._storage.get_folder(new_identifier)
        if renamed is not None:
            renamed.name = name
            self._storage.save(renamed)

        for child_identifier in folder.child_folder_identifiers:
            child = self._storage.get_folder(child_identifier)
            if child is not None:
                child.parent_identifier = new_identifier
                self._storage.save(child)

        for child_identifier in folder.child_file_identifiers:
            child_file = self._storage.get_file(child_identifier)
            if child_file is not None:
                child_file.parent_identifiers.discard(folder.identifier)
                child_file.parent_identifiers.add(new_identifier)
                self._storage.save(child_file)

    def _rename_file(self, path: Path, destination: Path) -> None:
        if path.leaf_identifier is None or destination.leaf_identifier is None:
            return
        renamed = self._storage.get_file(path.leaf_identifier)
        if renamed is None:
            return

        if not self._storage.can_delete(renamed.identifier):
            raise PermissionDeniedError(renamed.identifier, 'rename the file')

        desired = destination.leaf_identifier
        old_parent = path.folder_identifier
        new_parent = destination.folder_identifier
        if new_parent == old_parent:
            new_parent = None

        target_parents = set(renamed.parent_identifiers)
        if new_parent is not None:
            if self._storage.get_folder(new_parent) is None:
                raise DestinationMissingError(new_parent)
            if old_parent is not None:
                target_parents.discard(old_parent)
            target_parents.add(new_parent)

        if new_parent is not None or desired != renamed.name:
            self._check_file_targets(renamed, target_parents, desired)

        new_identifier = None
        if desired != renamed.identifier:
            new_identifier = reserve_identifier(
                self._storage,
                self._identifiers,
                desired,
            )

        if new_parent is not None:
            self._reparent_file(renamed, old_parent, new_parent)
            logger.info(
                'Moved file [%s] from [%s] to [%s]',
                renamed.identifier,
                old_parent,
                new_parent,
            )

        if new_identifier is not None:
            self._change_identifier(renamed.identifier, new_identifier)
            refreshed = self._storage.get_file(new_identifier)
            if refreshed is not None:
                refreshed.name = desired
                self._storage.save(refreshed)

    def _check_file_targets(
        self,
        renamed: File,
        parents: set[str],
        desired: str,
    ) -> None:
        for parent_identifier in sorted(parents):
            parent = self._storage.get_folder(parent_identifier)
            if parent is None:
                continue
            existing = self._child_file_named(
                parent,
                desired,
                exclude=renamed.identifier,
            )
            if existing is not None:
                raise NameCollisionError(desired, parent_identifier)

    def _change_identifier(self, old_identifier: str, new_identifier: str) -> None:
        self._storage.rename(old_identifier, new_identifier)
        logger.info('Renamed [%s] to [%s]', old_identifier, new_identifier)
