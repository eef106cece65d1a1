"""Management command to move, rename, merge or copy documents of a drive."""

import logging
from typing import Any, Final, override

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError, OutputWrapper

from server.apps.filemanager.exceptions import InteractionInterruptedError
from server.apps.filemanager.infrastructure.document_store import DocumentStore
from server.apps.filemanager.infrastructure.identifiers import (
    UniqueIdentifierGenerator,
)
from server.apps.filemanager.logic.conflicts import (
    OverwriteDecision,
    OverwriteQuestion,
)
from server.apps.filemanager.logic.copy_operations import CopyPlanner
from server.apps.filemanager.logic.hierarchy import Path
from server.apps.filemanager.logic.job_status import JobStatus
from server.apps.filemanager.logic.move_operations import MovePlanner

User = get_user_model()
logger = logging.getLogger(__name__)

# Console answers: (overwrite, apply to all remaining)
_ANSWERS: Final = {
    'y': (True, False),
    'n': (False, False),
    'a': (True, True),
    's': (False, True),
}


class ConsoleJobStatus(JobStatus):
    """Job status that asks overwrite questions on the console."""

    def __init__(self, stdout: OutputWrapper) -> None:
        """Initialize console job status.

        Args:
            stdout: Command output used for prompts.
        """
        super().__init__()
        self._stdout = stdout

    @override
    def ask(self, question: OverwriteQuestion) -> OverwriteDecision:
        """Prompt until a known answer is typed.

        Args:
            question: Question to show.

        Returns:
            Decision typed by the user.

        Raises:
            InteractionInterruptedError: On end of input or Ctrl+C.
        """
        prompt = (
            f'Overwrite [{question.destination_identifier}] with '
            f'[{question.source_identifier}]? '
            '[y]es, [n]o, yes to [a]ll, [s]kip all: '
        )
        while True:
            try:
                reply = input(prompt).strip().lower()
            except (EOFError, KeyboardInterrupt) as exc:
                raise InteractionInterruptedError(
                    'No answer from the console',
                ) from exc
            if reply in _ANSWERS:
                overwrite, apply_to_all = _ANSWERS[reply]
                return OverwriteDecision(
                    overwrite=overwrite,
                    apply_to_all=apply_to_all,
                )
            self._stdout.write(f'Unknown answer: {reply!r}')


class Command(BaseCommand):
    """Move, rename or copy folders and files of a drive."""

    help = (
        'Move documents into a folder, or rename a single document. '
        'With --copy the documents are copied instead. '
        'Paths are written folder, folder:file or :file.'
    )

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            'paths',
            nargs='+',
            help='Folders (folder) and files (folder:file) to move or copy',
        )
        parser.add_argument(
            '--to',
            dest='destination',
            required=True,
            help='Destination folder, or folder:new-name to rename one path',
        )
        parser.add_argument(
            '--user',
            dest='username',
            required=True,
            help='User performing the move',
        )
        parser.add_argument(
            '--drive',
            default=None,
            help='Drive to work in (default: from settings)',
        )
        parser.add_argument(
            '--interactive',
            action='store_true',
            help='Ask before overwriting files with the same name',
        )
        parser.add_argument(
            '--copy',
            action='store_true',
            help='Copy the documents, leaving the sources in place',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the move or copy.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If the user or a path is invalid.
        """
        try:
            user = User.objects.get(username=options['username'])
        except User.DoesNotExist as exc:
            raise CommandError(
                f'User not found: {options["username"]}',
            ) from exc

        try:
            paths = [Path.parse(raw) for raw in options['paths']]
            destination = Path.parse(options['destination'])
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        interactive = options['interactive']
        job = ConsoleJobStatus(self.stdout) if interactive else JobStatus()
        store = DocumentStore(user, options['drive'])
        copy = options['copy']
        planner_class = CopyPlanner if copy else MovePlanner
        planner = planner_class(store, UniqueIdentifierGenerator(), job)

        logger.info(
            '%s %d paths to [%s] for %s (job %s)',
            'Copying' if copy else 'Moving',
            len(paths),
            destination,
            user.username,
            job.job_id,
        )
        job.start()
        try:
            succeeded = planner.plan(paths, destination, interactive=interactive)
        finally:
            job.finish()

        for error in planner.errors:
            self.stderr.write(str(error))

        if planner.ignored:
            self.stdout.write(
                self.style.WARNING(
                    f'Nothing to do: {destination} is neither an existing '
                    'folder nor a new name for a single path',
                ),
            )
        elif succeeded:
            verb = 'Copied' if copy else 'Moved'
            self.stdout.write(
                self.style.SUCCESS(f'{verb} {len(paths)} paths to {destination}'),
            )
        else:
            self.stdout.write(
                self.style.WARNING(
                    f'Finished with {len(planner.errors)} errors',
                ),
            )
