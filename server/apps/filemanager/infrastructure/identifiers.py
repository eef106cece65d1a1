"""Generation of free document identifiers."""

import logging
from typing import Final, final

from django.conf import settings

from server.apps.filemanager.models import IDENTIFIER_MAX_LENGTH, Document

logger = logging.getLogger(__name__)

# Counters this long still share the queried prefix
_COUNTER_MAX_DIGITS: Final = 6


def get_identifier_separator() -> str:
    """Get the text placed between an identifier and its counter.

    Returns:
        Separator from settings or '-'.
    """
    return getattr(settings, 'FILEMANAGER_IDENTIFIER_SEPARATOR', '-')


def _with_counter(identifier: str, separator: str, counter: int) -> str:
    """Append a counter, cutting the identifier so the result still fits.

    Example: ('doc', '-', 2) -> 'doc-2'

    Args:
        identifier: Identifier at most IDENTIFIER_MAX_LENGTH long.
        separator: Text between identifier and counter.
        counter: Counter to append.

    Returns:
        Identifier with counter, at most IDENTIFIER_MAX_LENGTH long.
    """
    suffix = f'{separator}{counter}'
    return f'{identifier[:IDENTIFIER_MAX_LENGTH - len(suffix)]}{suffix}'


@final
class UniqueIdentifierGenerator:
    """Finds an identifier that no document of a drive uses yet.

    Only looks, never reserves: save right after generating to keep
    the identifier.
    """

    def generate(self, scope: str, desired_identifier: str) -> str:
        """Return the desired identifier, or it with the smallest free counter.

        Example: 'doc' is taken, 'doc-1' too -> 'doc-2'.

        Identifiers too long for the database are cut, and so is the
        end of the desired identifier when the counter needs room.

        Args:
            scope: Drive the identifier must be free in.
            desired_identifier: Identifier asked for.

        Returns:
            Free identifier.
        """
        desired = desired_identifier[:IDENTIFIER_MAX_LENGTH]
        separator = get_identifier_separator()
        prefix = desired[
            : IDENTIFIER_MAX_LENGTH - len(separator) - _COUNTER_MAX_DIGITS
        ]
        taken = set(
            Document.objects.filter(
                drive=scope,
                identifier__startswith=prefix,
            ).values_list('identifier', flat=True),
        )
        if desired not in taken:
            return desired

        counter = 1
        while _with_counter(desired, separator, counter) in taken:
            counter += 1

        unique_identifier = _with_counter(desired, separator, counter)
        logger.debug(
            'Identifier %s:%s is taken, using %s',
            scope,
            desired,
            unique_identifier,
        )
        return unique_identifier
