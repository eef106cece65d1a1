"""File manager settings."""

from server.settings.components import config

# Drive used when a command or store is not given one explicitly
FILEMANAGER_DEFAULT_DRIVE = config(
    'FILEMANAGER_DEFAULT_DRIVE',
    default='Drive',
)

# Placed between a taken identifier and its counter: doc -> doc-1
FILEMANAGER_IDENTIFIER_SEPARATOR = config(
    'FILEMANAGER_IDENTIFIER_SEPARATOR',
    default='-',
)
