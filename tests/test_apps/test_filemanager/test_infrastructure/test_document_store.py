"""Tests for the Django document store."""

import pytest
from django.contrib.auth import get_user_model

from server.apps.filemanager.infrastructure.document_store import (
    DocumentStore,
)
from server.apps.filemanager.logic.hierarchy import File, Folder
from server.apps.filemanager.models import Document, DocumentKind

User = get_user_model()


@pytest.mark.django_db
class TestDocumentStoreReads:
    """Tests for exists, get_folder and get_file."""

    def test_exists(self, store, make_folder):
        """Test exists for used and unused identifiers."""
        make_folder('photos')

        assert store.exists('photos')
        assert not store.exists('videos')

    def test_exists_scoped_to_drive(self, user, make_folder):
        """Test documents of other drives are invisible."""
        make_folder('photos')

        assert not DocumentStore(user, 'Archive').exists('photos')

    def test_default_drive_from_settings(self, user, settings):
        """Test drive falls back to FILEMANAGER_DEFAULT_DRIVE."""
        settings.FILEMANAGER_DEFAULT_DRIVE = 'Shared'

        assert DocumentStore(user).drive == 'Shared'

    def test_get_folder_with_children(self, store, make_folder, make_file):
        """Test folder lists child folders and files by name."""
        make_folder('root')
        make_folder('b-folder', parent='root', name='beta')
        make_folder('a-folder', parent='root', name='alpha')
        make_file('z-file', {'root'}, name='apple')
        make_file('y-file', {'root', 'other'}, name='banana')

        folder = store.get_folder('root')

        assert folder == Folder(
            identifier='root',
            name='root',
            parent_identifier=None,
            child_folder_identifiers=['a-folder', 'b-folder'],
            child_file_identifiers=['z-file', 'y-file'],
        )

    def test_get_folder_parent(self, store, make_folder):
        """Test parent identifier of a nested folder."""
        make_folder('root')
        make_folder('child', parent='root')

        assert store.get_folder('child').parent_identifier == 'root'

    def test_get_folder_missing_or_file(self, store, make_folder, make_file):
        """Test get_folder returns None for unknown ids and files."""
        make_folder('root')
        make_file('cat', {'root'})

        assert store.get_folder('nothing') is None
        assert store.get_folder('cat') is None

    def test_get_file(self, store, make_folder, make_file):
        """Test file carries its full parent set."""
        make_folder('a')
        make_folder('b')
        make_file('cat', {'a', 'b'}, name='Cat')

        file_entity = store.get_file('cat')

        assert file_entity == File(
            identifier='cat',
            name='Cat',
            parent_identifiers={'a', 'b'},
            attachment='',
        )

    def test_get_file_missing_or_folder(self, store, make_folder):
        """Test get_file returns None for unknown ids and folders."""
        make_folder('a')

        assert store.get_file('nothing') is None
        assert store.get_file('a') is None


@pytest.mark.django_db
class TestDocumentStoreWrites:
    """Tests for save, delete and rename."""

    def test_save_new_folder(self, store, user):
        """Test saving an unknown folder creates it for the user."""
        store.save(Folder(identifier='photos', name='Photos'))

        document = Document.objects.get(identifier='photos')
        assert document.kind == DocumentKind.FOLDER
        assert document.owner == user
        assert document.drive == 'Drive'
        assert document.parent_identifier == ''

    def test_save_folder_parent(self, store, make_folder):
        """Test re-parenting a folder."""
        make_folder('a')
        make_folder('b')
        folder = store.get_folder('b')
        folder.parent_identifier = 'a'

        store.save(folder)

        assert store.get_folder('b').parent_identifier == 'a'
        assert store.get_folder('a').child_folder_identifiers == ['b']

    def test_save_file_parents(self, store, make_folder, make_file):
        """Test links follow the parent set."""
        for identifier in ('a', 'b', 'c'):
            make_folder(identifier)
        make_file('cat', {'a', 'b'})
        file_entity = store.get_file('cat')
        file_entity.parent_identifiers = {'b', 'c'}

        store.save(file_entity)

        assert store.get_file('cat').parent_identifiers == {'b', 'c'}
        assert store.get_folder('a').child_file_identifiers == []
        assert store.get_folder('c').child_file_identifiers == ['cat']

    def test_primary_parent_kept_while_linked(self, store, make_folder, make_file):
        """Test the primary parent only changes when it is unlinked."""
        for identifier in ('a', 'b', 'c'):
            make_folder(identifier)
        make_file('cat', {'b'})
        file_entity = store.get_file('cat')
        file_entity.parent_identifiers.add('a')

        store.save(file_entity)

        assert Document.objects.get(identifier='cat').parent_identifier == 'b'

        file_entity.parent_identifiers = {'c', 'a'}
        store.save(file_entity)

        assert Document.objects.get(identifier='cat').parent_identifier == 'a'

    def test_save_new_file(self, store, make_folder):
        """Test saving an unknown file creates document and links."""
        make_folder('a')

        store.save(File(identifier='cat', name='Cat', parent_identifiers={'a'}))

        assert store.get_file('cat').parent_identifiers == {'a'}

    def test_delete(self, store, make_folder, make_file):
        """Test delete removes the document and its links."""
        make_folder('a')
        make_file('cat', {'a'})

        store.delete('cat')

        assert not store.exists('cat')
        assert store.get_folder('a').child_file_identifiers == []

    def test_delete_missing_is_ignored(self, store):
        """Test deleting an unknown identifier does nothing."""
        store.delete('nothing')

        assert not Document.objects.exists()

    def test_rename_keeps_own_relations(self, store, make_folder, make_file):
        """Test a renamed file keeps its parents."""
        make_folder('a')
        make_file('cat', {'a'}, name='Cat')

        store.rename('cat', 'kitten')

        renamed = store.get_file('kitten')
        assert renamed.parent_identifiers == {'a'}
        assert renamed.name == 'Cat'
        assert not store.exists('cat')

    def test_rename_leaves_incoming_relations(self, store, make_folder):
        """Test children still point at the old identifier."""
        make_folder('a')
        make_folder('child', parent='a')

        store.rename('a', 'b')

        assert store.get_folder('child').parent_identifier == 'a'
        assert store.get_folder('b').child_folder_identifiers == []


@pytest.mark.django_db
class TestDocumentStorePermissions:
    """Tests for can_edit and can_delete."""

    def test_owner_with_permissions(self, store, make_folder):
        """Test the owner may edit and delete."""
        make_folder('a')

        assert store.can_edit('a')
        assert store.can_delete('a')

    def test_document_of_other_user(self, store, make_folder, other_user):
        """Test documents owned by someone else are read-only."""
        make_folder('a', owner=other_user)

        assert not store.can_edit('a')
        assert not store.can_delete('a')

    def test_superuser_bypasses_ownership(self, make_folder, other_user):
        """Test superusers may touch every document."""
        make_folder('a', owner=other_user)
        admin = User.objects.create_superuser(
            username='admin',
            password='testpass123',
            email='admin@example.com',
        )
        admin_store = DocumentStore(admin, 'Drive')

        assert admin_store.can_edit('a')
        assert admin_store.can_delete('a')

    def test_owner_without_permissions(self, make_folder):
        """Test ownership alone is not enough."""
        owner = User.objects.create_user(
            username='plain',
            password='testpass123',
        )
        make_folder('b', owner=owner)
        plain_store = DocumentStore(owner, 'Drive')

        assert not plain_store.can_edit('b')
        assert not plain_store.can_delete('b')
        assert not plain_store.can_edit('new-document')

    def test_unused_identifier(self, store):
        """Test creating needs add permission, deleting nothing is refused."""
        assert store.can_edit('new-document')
        assert not store.can_delete('new-document')
