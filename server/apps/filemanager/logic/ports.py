"""Collaborators the move logic depends on.

The move logic only talks to these protocols, so it runs the same way
against the Django document store and against test doubles.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from server.apps.filemanager.logic.conflicts import (
        OverwriteDecision,
        OverwriteQuestion,
    )
    from server.apps.filemanager.logic.hierarchy import File, Folder


class StoragePort(Protocol):
    """Document storage with permission predicates for the current user."""

    @property
    def drive(self) -> str:
        """Scope in which identifiers are unique."""
        ...

    def exists(self, identifier: str) -> bool:
        """Check if a folder or file has this identifier."""
        ...

    def get_folder(self, identifier: str) -> 'Folder | None':
        """Fetch a folder, None if there is no such folder."""
        ...

    def get_file(self, identifier: str) -> 'File | None':
        """Fetch a file, None if there is no such file."""
        ...

    def save(self, entity: 'Folder | File') -> None:
        """Persist the current field values of a folder or file."""
        ...

    def delete(self, identifier: str) -> None:
        """Remove a folder or file permanently."""
        ...

    def rename(self, old_identifier: str, new_identifier: str) -> None:
        """Atomically change the identifier of a document.

        The document keeps its own relations; other documents that point
        at the old identifier are not updated.
        """
        ...

    def can_edit(self, identifier: str) -> bool:
        """Check if the user may change (or create) this document."""
        ...

    def can_delete(self, identifier: str) -> bool:
        """Check if the user may delete this document."""
        ...


class IdentifierGenerator(Protocol):
    """Produces identifiers that are not in use yet."""

    def generate(self, scope: str, desired_identifier: str) -> str:
        """Return the desired identifier or the closest free variant."""
        ...


class JobPort(Protocol):
    """Progress reporting and user questions of the hosting job."""

    @property
    def is_cancelled(self) -> bool:
        """Check if the job was asked to stop."""
        ...

    def push_level_progress(self, total_steps: int) -> None:
        """Enter a sub-operation made of ``total_steps`` steps."""
        ...

    def step_progress(self) -> None:
        """Mark one step of the innermost sub-operation as done."""
        ...

    def pop_level_progress(self) -> None:
        """Leave the innermost sub-operation."""
        ...

    def ask(self, question: 'OverwriteQuestion') -> 'OverwriteDecision':
        """Block until the question is answered.

        Raises:
            InteractionInterruptedError: If the wait is interrupted.
        """
        ...
