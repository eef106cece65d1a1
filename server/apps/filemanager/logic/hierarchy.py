"""Folders, files and paths as seen by the move logic.

These are plain values fetched from and saved back to a storage port.
They carry no behaviour tied to a database: mutate the fields, then
hand the object to ``save``.
"""

from dataclasses import dataclass, field
from typing import Final, Self, final, override

# Separates folder and leaf in the textual form of a path
_PATH_SEPARATOR: Final = ':'


@final
@dataclass(slots=True)
class Folder:
    """Tree node holding child folders and files.

    A folder has at most one parent; ``None`` means root (or orphan).
    """

    identifier: str
    name: str
    parent_identifier: str | None = None
    child_folder_identifiers: list[str] = field(default_factory=list)
    child_file_identifiers: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Check if the folder has neither child folders nor files.

        Returns:
            True if there are no children of either kind.
        """
        return not (
            self.child_folder_identifiers or self.child_file_identifiers
        )


@final
@dataclass(slots=True)
class File:
    """Content-bearing document referenced from any number of folders.

    The attachment is opaque to the move logic; it is destroyed together
    with the file once ``parent_identifiers`` becomes empty.
    """

    identifier: str
    name: str
    parent_identifiers: set[str] = field(default_factory=set)
    attachment: str = ''


@final
@dataclass(frozen=True, slots=True)
class Path:
    """Addresses a folder, a file inside a folder, or a rename target.

    Examples:
        Path('photos') is the folder 'photos' itself.
        Path('photos', 'cat') is the file 'cat' seen from 'photos', or,
        as a destination, the wish to be called 'cat' inside 'photos'.
        Path(None, 'cat') asks for 'cat' without choosing a parent.
    """

    folder_identifier: str | None = None
    leaf_identifier: str | None = None

    @classmethod
    def parse(cls, raw: str) -> Self:
        """Build a path from its textual form.

        Accepted forms: 'folder', 'folder:leaf' and ':leaf'.

        Args:
            raw: Path text.

        Returns:
            Parsed path.

        Raises:
            ValueError: If the text addresses nothing or has more than
                one separator.
        """
        folder, separator, leaf = raw.strip().partition(_PATH_SEPARATOR)
        if _PATH_SEPARATOR in leaf:
            raise ValueError(f'Invalid path: {raw!r}')
        path = cls(
            folder_identifier=folder or None,
            leaf_identifier=leaf if separator and leaf else None,
        )
        if path.folder_identifier is None and path.leaf_identifier is None:
            raise ValueError(f'Invalid path: {raw!r}')
        return path

    @override
    def __str__(self) -> str:
        """Textual form, the inverse of ``parse``."""
        if self.leaf_identifier is None:
            return self.folder_identifier or ''
        folder = self.folder_identifier or ''
        return f'{folder}{_PATH_SEPARATOR}{self.leaf_identifier}'
