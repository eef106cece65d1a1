"""Exceptions for file manager app."""


class MoveError(Exception):
    """Base for failures that skip a single item of a move request."""


class CycleError(MoveError):
    """Raised when a folder would be moved into itself or a descendant."""

    def __init__(
        self,
        folder_identifier: str,
        destination_identifier: str,
    ) -> None:
        """Initialize CycleError.

        Args:
            folder_identifier: Folder being moved.
            destination_identifier: Requested new parent folder.
        """
        self.folder_identifier = folder_identifier
        self.destination_identifier = destination_identifier
        super().__init__(
            f'Cannot move [{folder_identifier}] to a sub-folder of itself '
            f'([{destination_identifier}])',
        )


class PermissionDeniedError(MoveError):
    """Raised when the current user lacks a required right on a document."""

    def __init__(self, identifier: str, action: str) -> None:
        """Initialize PermissionDeniedError.

        Args:
            identifier: Document the right is missing on.
            action: What was attempted (move, rename, overwrite...).
        """
        self.identifier = identifier
        self.action = action
        super().__init__(
            f'You are not allowed to {action} [{identifier}]',
        )


class DestinationMissingError(MoveError):
    """Raised when the destination folder doesn't exist."""

    def __init__(self, identifier: str) -> None:
        """Initialize DestinationMissingError.

        Args:
            identifier: Missing destination folder.
        """
        self.identifier = identifier
        super().__init__(
            f"The destination folder [{identifier}] doesn't exist",
        )


class NameCollisionError(MoveError):
    """Raised when a rename target name is taken by another document."""

    def __init__(self, name: str, parent_identifier: str) -> None:
        """Initialize NameCollisionError.

        Args:
            name: Requested name.
            parent_identifier: Folder that already holds that name.
        """
        self.name = name
        self.parent_identifier = parent_identifier
        super().__init__(
            f'A document with the same name [{name}] already exists '
            f'under [{parent_identifier}]',
        )


class InteractionInterruptedError(Exception):
    """Raised when waiting for an answer to a job question is interrupted."""
