"""Shared machinery of batch operations on folders and files.

A batch walks a list of source paths. Each item is processed on its own:
a failing item is logged and recorded, the others go on, and nothing
done before the failure is rolled back.
"""

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Concatenate, ParamSpec

from server.apps.filemanager.exceptions import MoveError, PermissionDeniedError
from server.apps.filemanager.logic.conflicts import ConflictResolver
from server.apps.filemanager.logic.hierarchy import File, Folder, Path
from server.apps.filemanager.logic.job_status import progress_level

if TYPE_CHECKING:
    from server.apps.filemanager.logic.ports import (
        IdentifierGenerator,
        JobPort,
        StoragePort,
    )

logger = logging.getLogger(__name__)

_Params = ParamSpec('_Params')


def reserve_identifier(
    storage: 'StoragePort',
    identifiers: 'IdentifierGenerator',
    desired: str,
) -> str:
    """Pick a free identifier close to ``desired`` the user may create.

    Raises:
        PermissionDeniedError: if the user can't create the document.
    """
    new_identifier = identifiers.generate(storage.drive, desired)
    if not storage.can_edit(new_identifier):
        raise PermissionDeniedError(new_identifier, 'create')
    return new_identifier


class BatchOperation:
    """Base of the move, copy and delete planners."""

    def __init__(
        self,
        storage: 'StoragePort',
        job: 'JobPort | None' = None,
    ) -> None:
        """Initialize the operation.

        Args:
            storage: Document storage of the current user.
            job: Job to report progress to and ask questions through.
        """
        self._storage = storage
        self._job = job
        self._resolver = ConflictResolver(storage, job)
        self._errors: list[MoveError] = []
        self._cancelled = False
        self._ignored = False
        self._visited: set[str] = set()

    @property
    def errors(self) -> list[MoveError]:
        """Failures of the last request, one per skipped item."""
        return list(self._errors)

    @property
    def ignored(self) -> bool:
        """Whether the last request was not a supported request."""
        return self._ignored

    def _begin(self, paths: Iterable[Path], *, interactive: bool) -> list[Path]:
        """Reset the request state.

        Returns:
            Source paths without repetitions, in first occurrence order.
        """
        self._errors = []
        self._cancelled = False
        self._ignored = False
        self._visited = set()
        self._resolver = ConflictResolver(
            self._storage,
            self._job,
            interactive=interactive,
        )
        return list(dict.fromkeys(paths))

    def _ignore(self, message: str, *args: object) -> None:
        logger.warning(message, *args)
        self._ignored = True

    def _succeeded(self) -> bool:
        return not (self._errors or self._cancelled)

    def _process_all(
        self,
        paths: list[Path],
        operation: Callable[Concatenate[Path, _Params], None],
        *args: _Params.args,
        **kwargs: _Params.kwargs,
    ) -> None:
        """Run ``operation`` on every path, one progress step each.

        Cancellation is checked before each path.
        """
        with progress_level(self._job, len(paths)) as step:
            for index, path in enumerate(paths):
                if self._job is not None and self._job.is_cancelled:
                    logger.warning(
                        'Request cancelled, %d paths left unprocessed',
                        len(paths) - index,
                    )
                    self._cancelled = True
                    return
                self._attempt(operation, path, *args, **kwargs)
                step()

    def _attempt(
        self,
        operation: Callable[_Params, None],
        *args: _Params.args,
        **kwargs: _Params.kwargs,
    ) -> None:
        """Run one item operation, logging and recording its failure."""
        try:
            operation(*args, **kwargs)
        except MoveError as error:
            logger.error('%s', error)
            self._errors.append(error)

    def _first_visit(self, folder_identifier: str) -> bool:
        """Record a folder walked into, False if it was walked before."""
        if folder_identifier in self._visited:
            logger.warning('Folder parents loop through [%s]', folder_identifier)
            return False
        self._visited.add(folder_identifier)
        return True

    def _is_bulk_target(self, destination: Path) -> bool:
        return (
            destination.leaf_identifier is None
            and destination.folder_identifier is not None
            and self._storage.exists(destination.folder_identifier)
        )

    def _is_descendant_or_self(self, candidate: str, ancestor: str) -> bool:
        """Walk up from ``candidate`` looking for ``ancestor``.

        A dangling parent reference ends the walk: not a descendant.
        """
        visited: set[str] = set()
        current: str | None = candidate
        while current is not None and current != ancestor:
            if current in visited:
                logger.warning('Folder parents loop through [%s]', current)
                return False
            visited.add(current)
            folder = self._storage.get_folder(current)
            if folder is None:
                return False
            current = folder.parent_identifier
        return current is not None

    def _make_room(
        self,
        source_identifier: str,
        parent: Folder,
        name: str,
        exclude: str | None = None,
    ) -> bool:
        """Clear ``name`` under ``parent`` for an incoming file.

        Returns:
            False if a same-named file stays and the item must be skipped.
        """
        existing = self._child_file_named(parent, name, exclude=exclude)
        if existing is None:
            return True

        if not self._resolver.should_overwrite(source_identifier, existing):
            logger.info(
                'Skipped file [%s], [%s] is kept under [%s]',
                source_identifier,
                existing.identifier,
                parent.identifier,
            )
            return False

        self._remove_from_folder(existing, parent.identifier)
        return True

    def _remove_from_folder(self, existing: File, parent: str) -> None:
        existing.parent_identifiers.discard(parent)
        if existing.parent_identifiers:
            self._storage.save(existing)
            logger.info('Detached file [%s] from [%s]', existing.identifier, parent)
        else:
            self._storage.delete(existing.identifier)
            logger.info('Deleted file [%s]', existing.identifier)

    def _delete_if_empty(self, folder_identifier: str) -> None:
        folder = self._storage.get_folder(folder_identifier)
        if folder is None or not folder.is_empty():
            return
        if not self._storage.can_delete(folder_identifier):
            raise PermissionDeniedError(folder_identifier, 'delete the folder')
        self._storage.delete(folder_identifier)
        logger.info('Deleted empty folder [%s]', folder_identifier)

    def _child_folder_named(
        self,
        parent: Folder,
        name: str,
        exclude: str | None = None,
    ) -> Folder | None:
        for child_identifier in parent.child_folder_identifiers:
            if child_identifier == exclude:
                continue
            child = self._storage.get_folder(child_identifier)
            if child is not None and child.name == name:
                return child
        return None

    def _child_file_named(
        self,
        parent: Folder,
        name: str,
        exclude: str | None = None,
    ) -> File | None:
        for child_identifier in parent.child_file_identifiers:
            if child_identifier == exclude:
                continue
            child = self._storage.get_file(child_identifier)
            if child is not None and child.name == name:
                return child
        return None
