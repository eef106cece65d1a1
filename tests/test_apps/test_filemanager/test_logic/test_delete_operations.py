"""Tests for deleting folders and files."""

import pytest
from django.core.files.base import ContentFile

from server.apps.filemanager.exceptions import PermissionDeniedError
from server.apps.filemanager.logic.hierarchy import Path


@pytest.mark.django_db
class TestDeleteFolder:
    """Tests for deleting folders with their content."""

    def test_subtree_deleted(self, deleter, store, job, make_folder, make_file):
        """Test a folder goes away with everything only it holds."""
        make_folder('other')
        make_folder('a')
        make_folder('b', parent='a')
        make_file('f', {'b'})
        make_file('g', {'a', 'other'})

        assert deleter.plan([Path('a')])

        assert not store.exists('a')
        assert not store.exists('b')
        assert not store.exists('f')
        assert store.get_file('g').parent_identifiers == {'other'}
        assert len(job.pushed) == job.pops
        assert job.overflows == 0

    def test_undeletable_child_keeps_ancestors(
        self,
        deleter,
        store,
        make_folder,
        make_file,
        other_user,
    ):
        """Test a folder holding a foreign file is not deleted."""
        make_folder('a')
        make_folder('b', parent='a')
        make_file('f', {'b'}, owner=other_user)

        assert not deleter.plan([Path('a')])

        error = deleter.errors[0]
        assert isinstance(error, PermissionDeniedError)
        assert error.identifier == 'f'
        assert store.get_folder('a').child_folder_identifiers == ['b']
        assert store.get_file('f').parent_identifiers == {'b'}

    def test_folder_of_other_user(self, deleter, store, make_folder, other_user):
        """Test foreign folders can't be deleted."""
        make_folder('x', owner=other_user)

        assert not deleter.plan([Path('x')])

        assert isinstance(deleter.errors[0], PermissionDeniedError)
        assert store.exists('x')

    def test_folder_and_its_child_listed(self, deleter, store, make_folder):
        """Test a path already deleted with its parent is skipped."""
        make_folder('a')
        make_folder('b', parent='a')

        assert deleter.plan([Path('a'), Path('b')])

        assert not store.exists('a')
        assert not store.exists('b')

    def test_parent_loop_stops(self, deleter, store, make_folder):
        """Test folders parented to each other are walked only once."""
        make_folder('a', parent='b')
        make_folder('b', parent='a')

        assert deleter.plan([Path('a')])

        # Each keeps the other as child, so neither ends up empty
        assert store.exists('a')
        assert store.exists('b')


@pytest.mark.django_db
class TestDeleteFile:
    """Tests for deleting files from one or all folders."""

    def test_detached_from_one_folder(
        self,
        deleter,
        store,
        make_folder,
        make_file,
    ):
        """Test other parents keep the file."""
        make_folder('a')
        make_folder('b')
        make_file('f', {'a', 'b'})

        assert deleter.plan([Path('a', 'f')])

        assert store.get_file('f').parent_identifiers == {'b'}

    def test_last_parent_deletes(self, deleter, store, make_folder, make_file):
        """Test removing the only parent deletes the file."""
        make_folder('a')
        make_file('f', {'a'})

        assert deleter.plan([Path('a', 'f')])

        assert not store.exists('f')
        assert store.exists('a')

    def test_deleted_from_everywhere(
        self,
        deleter,
        store,
        make_folder,
        make_file,
    ):
        """Test ':file' deletes the file from all its folders."""
        make_folder('a')
        make_folder('b')
        make_file('f', {'a', 'b'})

        assert deleter.plan([Path(None, 'f')])

        assert not store.exists('f')
        assert store.get_folder('a').child_file_identifiers == []
        assert store.get_folder('b').child_file_identifiers == []

    def test_folder_not_holding_file(
        self,
        deleter,
        store,
        make_folder,
        make_file,
    ):
        """Test a file is left alone when not in the given folder."""
        make_folder('a')
        make_folder('b')
        make_file('f', {'a'})

        assert deleter.plan([Path('b', 'f')])

        assert store.get_file('f').parent_identifiers == {'a'}

    def test_file_of_other_user(
        self,
        deleter,
        store,
        make_folder,
        make_file,
        other_user,
    ):
        """Test foreign files can't be deleted."""
        make_folder('a')
        make_file('f', {'a'}, owner=other_user)

        assert not deleter.plan([Path(None, 'f')])

        assert isinstance(deleter.errors[0], PermissionDeniedError)
        assert store.exists('f')

    def test_attachment_deleted(
        self,
        deleter,
        make_folder,
        make_file,
        mock_s3,
    ):
        """Test the file content leaves the bucket."""
        make_folder('a')
        document = make_file('f', {'a'})
        document.content.save('doc.txt', ContentFile(b'data'), save=True)

        assert deleter.plan([Path('a', 'f')])

        assert not list(mock_s3.Bucket('file-manager').objects.all())


@pytest.mark.django_db
class TestDeleteBatch:
    """Tests for delete request dispatch."""

    def test_empty_request_ignored(self, deleter, job):
        """Test nothing is done without paths."""
        assert deleter.plan([])

        assert deleter.ignored
        assert job.pushed == []

    def test_missing_path_is_noop(self, deleter, make_folder):
        """Test unknown paths are no error."""
        make_folder('a')

        assert deleter.plan([Path('ghost'), Path('a', 'ghost')])

        assert deleter.errors == []
        assert not deleter.ignored
