"""Shared fixtures for file manager app tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from moto import mock_aws

from server.apps.filemanager.exceptions import InteractionInterruptedError
from server.apps.filemanager.infrastructure.document_store import (
    DocumentStore,
)
from server.apps.filemanager.infrastructure.identifiers import (
    UniqueIdentifierGenerator,
)
from server.apps.filemanager.logic.copy_operations import CopyPlanner
from server.apps.filemanager.logic.delete_operations import DeletePlanner
from server.apps.filemanager.logic.move_operations import MovePlanner
from server.apps.filemanager.models import (
    Document,
    DocumentKind,
    DocumentParent,
)

User = get_user_model()

DRIVE = 'Drive'


class RecordingJob:
    """Job double that records progress calls and replays answers."""

    def __init__(self):
        self.answers = []
        self.questions = []
        self.pushed = []
        self.pops = 0
        self.levels = []
        self.overflows = 0
        self.is_cancelled = False
        self.cancel_after_steps = None
        self._steps = 0

    def push_level_progress(self, total_steps):
        self.pushed.append(total_steps)
        self.levels.append([total_steps, 0])

    def step_progress(self):
        level = self.levels[-1]
        level[1] += 1
        if level[1] > level[0]:
            self.overflows += 1
        self._steps += 1
        if self._steps == self.cancel_after_steps:
            self.is_cancelled = True

    def pop_level_progress(self):
        self.pops += 1
        self.levels.pop()

    def ask(self, question):
        self.questions.append(question)
        if not self.answers:
            raise InteractionInterruptedError('No answer scripted')
        return self.answers.pop(0)


def _grant_document_permissions(user):
    user.user_permissions.add(
        *Permission.objects.filter(
            content_type__app_label='filemanager',
            codename__in=[
                'add_document',
                'change_document',
                'delete_document',
            ],
        ),
    )


@pytest.fixture
def user(db):
    """Create test user allowed to add, change and delete documents.

    Returns:
        User instance for testing.
    """
    created = User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )
    _grant_document_permissions(created)
    return created


@pytest.fixture
def other_user(db):
    """Create second test user owning documents the first can't touch.

    Returns:
        Second user instance.
    """
    created = User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )
    _grant_document_permissions(created)
    return created


@pytest.fixture
def mock_s3():
    """Mock S3 service with file-manager bucket.

    Yields:
        boto3 S3 resource with file-manager bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='file-manager')

        yield conn


@pytest.fixture
def make_folder(user):
    """Factory creating folder documents.

    Returns:
        Function (identifier, parent=None, name=None, owner=None) -> Document.
    """

    def factory(identifier, parent=None, name=None, owner=None):
        return Document.objects.create(
            owner=owner or user,
            drive=DRIVE,
            identifier=identifier,
            kind=DocumentKind.FOLDER,
            name=name or identifier,
            parent_identifier=parent or '',
        )

    return factory


@pytest.fixture
def make_file(user):
    """Factory creating file documents linked to their parent folders.

    Returns:
        Function (identifier, parents, name=None, owner=None) -> Document.
    """

    def factory(identifier, parents, name=None, owner=None):
        document = Document.objects.create(
            owner=owner or user,
            drive=DRIVE,
            identifier=identifier,
            kind=DocumentKind.FILE,
            name=name or identifier,
            parent_identifier=min(parents, default=''),
        )
        for parent in parents:
            DocumentParent.objects.create(
                document=document,
                folder_identifier=parent,
            )
        return document

    return factory


@pytest.fixture
def store(user):
    """Document store of the test user on the test drive.

    Returns:
        DocumentStore instance.
    """
    return DocumentStore(user, DRIVE)


@pytest.fixture
def job():
    """Job double recording progress and answering from a script.

    Returns:
        RecordingJob instance.
    """
    return RecordingJob()


@pytest.fixture
def planner(store, job):
    """Move planner over the real document store.

    Returns:
        MovePlanner reporting to the recording job.
    """
    return MovePlanner(store, UniqueIdentifierGenerator(), job)


@pytest.fixture
def copier(store, job):
    """Copy planner over the real document store.

    Returns:
        CopyPlanner reporting to the recording job.
    """
    return CopyPlanner(store, UniqueIdentifierGenerator(), job)


@pytest.fixture
def deleter(store, job):
    """Delete planner over the real document store.

    Returns:
        DeletePlanner reporting to the recording job.
    """
    return DeletePlanner(store, job)


@pytest.fixture
def without_add_permission(user):
    """Take the right to create documents away from the test user."""
    user.user_permissions.remove(
        Permission.objects.get(
            content_type__app_label='filemanager',
            codename='add_document',
        ),
    )
