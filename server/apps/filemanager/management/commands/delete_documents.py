"""Management command to delete documents of a drive."""

import logging
from typing import Any, override

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from server.apps.filemanager.infrastructure.document_store import DocumentStore
from server.apps.filemanager.logic.delete_operations import DeletePlanner
from server.apps.filemanager.logic.hierarchy import Path
from server.apps.filemanager.logic.job_status import JobStatus

User = get_user_model()
logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete folders and files of a drive."""

    help = (
        'Delete folders with their content, or files. folder:file takes '
        'the file out of that folder, :file deletes it from every folder.'
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
            help='Folders (folder) and files (folder:file or :file) to delete',
        )
        parser.add_argument(
            '--user',
            dest='username',
            required=True,
            help='User performing the delete',
        )
        parser.add_argument(
            '--drive',
            default=None,
            help='Drive to work in (default: from settings)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the delete.

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
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        job = JobStatus()
        planner = DeletePlanner(DocumentStore(user, options['drive']), job)

        logger.info(
            'Deleting %d paths for %s (job %s)',
            len(paths),
            user.username,
            job.job_id,
        )
        job.start()
        try:
            succeeded = planner.plan(paths)
        finally:
            job.finish()

        for error in planner.errors:
            self.stderr.write(str(error))

        if succeeded:
            self.stdout.write(self.style.SUCCESS(f'Deleted {len(paths)} paths'))
        else:
            self.stdout.write(
                self.style.WARNING(
                    f'Finished with {len(planner.errors)} errors',
                ),
            )
