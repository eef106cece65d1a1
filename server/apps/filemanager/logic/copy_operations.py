"""Business logic for copying folders and files.

A copy request has the same shape as a move request:

- destination is an existing folder without leaf: every source is copied
  into it under its own name. A folder copied onto a same-named folder
  is merged into it, same-named files are overwritten or skipped.
- exactly one source and a destination folder with leaf: the source is
  copied into that folder under the leaf name.

Copies get fresh identifiers and, for files, their own attachment.
The sources are never changed.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, final

from server.apps.filemanager.exceptions import (
    CycleError,
    DestinationMissingError,
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
class CopyPlanner(BatchOperation):
    """Copies documents through a storage port."""

    def __init__(
        self,
        storage: 'StoragePort',
        identifiers: 'IdentifierGenerator',
        job: 'JobPort | None' = None,
    ) -> None:
        """Initialize the planner.

        Args:
            storage: Document storage of the current user.
            identifiers: Source of free identifiers for the copies.
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
        """Copy the given paths.

        Args:
            paths: Folders and files to copy, processed in this order.
            destination: Target folder, or target folder and copy name.
            interactive: Whether name collisions may be asked to the user.

        Returns:
            True if every item was processed without error.
        """
        sources = self._begin(paths, interactive=interactive)

        if not sources or destination is None:
            self._ignore('Ignoring copy request without paths or destination')
        elif self._is_bulk_target(destination):
            self._process_all(
                sources,
                self._copy,
                destination.folder_identifier or '',
            )
        elif (
            len(sources) == 1
            and destination.folder_identifier is not None
            and destination.leaf_identifier is not None
        ):
            with progress_level(self._job, 1) as step:
                self._attempt(
                    self._copy,
                    sources[0],
                    destination.folder_identifier,
                    destination.leaf_identifier,
                )
                step()
        else:
            self._ignore(
                'Ignoring copy request of %d paths to [%s]',
                len(sources),
                destination,
            )

        return self._succeeded()

    def _copy(
        self,
        path: Path,
        destination: str,
        name: str | None = None,
    ) -> None:
        self._visited = set()
        if path.leaf_identifier is not None:
            self._copy_file(path.leaf_identifier, destination, name)
        elif path.folder_identifier is not None:
            self._copy_folder(path.folder_identifier, destination, name)

    def _copy_folder(
        self,
        folder_identifier: str,
        new_parent: str,
        name: str | None = None,
    ) -> None:
        if self._is_descendant_or_self(new_parent, folder_identifier):
            raise CycleError(folder_identifier, new_parent)

        folder = self._storage.get_folder(folder_identifier)
        if folder is None or not self._first_visit(folder_identifier):
            return

        parent = self._storage.get_folder(new_parent)
        if parent is None:
            raise DestinationMissingError(new_parent)

        target_name = name or folder.name
        sibling = self._child_folder_named(parent, target_name)
        if sibling is None:
            target = reserve_identifier(
                self._storage,
                self._identifiers,
                name or folder_identifier,
            )
            self._storage.save(
                Folder(
                    identifier=target,
                    name=target_name,
                    parent_identifier=new_parent,
                ),
            )
            logger.info(
                'Copied folder [%s] to [%s] as [%s]',
                folder_identifier,
                new_parent,
                target,
            )
        elif sibling.identifier == folder_identifier:
            logger.info(
                'Folder [%s] is already in [%s]',
                folder_identifier,
                new_parent,
            )
            return
        else:
            target = sibling.identifier
            logger.info(
                'Merging copy of folder [%s] into [%s]',
                folder_identifier,
                target,
            )

        self._copy_children(folder, target)

    def _copy_children(self, source: Folder, destination: str) -> None:
        with progress_level(
            self._job,
            len(source.child_folder_identifiers)
            + len(source.child_file_identifiers),
        ) as step:
            for child_identifier in source.child_folder_identifiers:
                self._attempt(self._copy_folder, child_identifier, destination)
                step()

            for child_identifier in source.child_file_identifiers:
                self._attempt(self._copy_file, child_identifier, destination)
                step()

    def _copy_file(
        self,
        file_identifier: str,
        new_parent: str,
        name: str | None = None,
    ) -> None:
        source = self._storage.get_file(file_identifier)
        if source is None:
            return

        parent = self._storage.get_folder(new_parent)
        if parent is None:
            raise DestinationMissingError(new_parent)

        target_name = name or source.name
        existing = self._child_file_named(parent, target_name)
        if existing is not None and existing.identifier == file_identifier:
            logger.info(
                'File [%s] is already in [%s]',
                file_identifier,
                new_parent,
            )
            return

        target = reserve_identifier(
            self._storage,
            self._identifiers,
            name or file_identifier,
        )
        if not self._make_room(file_identifier, parent, target_name):
            return

        self._storage.save(
            File(
                identifier=target,
                name=target_name,
                parent_identifiers={new_parent},
                attachment=source.attachment,
            ),
        )
        logger.info(
            'Copied file [%s] to [%s] as [%s]',
            file_identifier,
            new_parent,
            target,
        )
