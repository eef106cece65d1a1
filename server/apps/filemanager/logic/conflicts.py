"""Overwrite decisions for files that collide by name."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, final

from server.apps.filemanager.exceptions import (
    InteractionInterruptedError,
    PermissionDeniedError,
)

if TYPE_CHECKING:
    from server.apps.filemanager.logic.hierarchy import File
    from server.apps.filemanager.logic.ports import JobPort, StoragePort

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class OverwriteQuestion:
    """Asks whether ``source`` may replace ``destination``."""

    source_identifier: str
    destination_identifier: str


@final
@dataclass(frozen=True, slots=True)
class OverwriteDecision:
    """Answer to an OverwriteQuestion.

    With ``apply_to_all`` the same answer is used for every later
    collision of the request and no more questions are asked.
    """

    overwrite: bool = False
    apply_to_all: bool = False


@final
class ConflictResolver:
    """Decides whether a moved file replaces a same-named file.

    One resolver lives for one move request; the "apply to all" answer
    is forgotten with it.
    """

    def __init__(
        self,
        storage: 'StoragePort',
        job: 'JobPort | None' = None,
        *,
        interactive: bool = False,
    ) -> None:
        """Initialize the resolver.

        Args:
            storage: Storage used for the permission checks.
            job: Job that can ask the user, if any.
            interactive: Whether questions may be asked at all.
        """
        self._storage = storage
        self._job = job
        self._interactive = interactive
        self._overwrite_all: bool | None = None

    def should_overwrite(self, source_identifier: str, existing: 'File') -> bool:
        """Decide whether ``existing`` gets replaced by the moved file.

        Args:
            source_identifier: File being moved.
            existing: Same-named file already in the destination.

        Returns:
            True to overwrite, False to leave both files untouched.

        Raises:
            PermissionDeniedError: If the user can't overwrite ``existing``.
        """
        if not self._can_overwrite(existing):
            raise PermissionDeniedError(existing.identifier, 'overwrite')

        if not self._interactive or self._job is None:
            return False

        if self._overwrite_all is not None:
            return self._overwrite_all

        question = OverwriteQuestion(
            source_identifier=source_identifier,
            destination_identifier=existing.identifier,
        )
        try:
            decision = self._job.ask(question)
        except InteractionInterruptedError:
            logger.warning(
                'Overwrite question for [%s] has been interrupted',
                existing.identifier,
            )
            return False

        if decision.apply_to_all:
            self._overwrite_all = decision.overwrite
        return decision.overwrite

    def _can_overwrite(self, existing: 'File') -> bool:
        # Files with other parents are only detached, not deleted
        if len(existing.parent_identifiers) > 1:
            return self._storage.can_edit(existing.identifier)
        return self._storage.can_delete(existing.identifier)
