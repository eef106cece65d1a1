import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import server.apps.filemanager.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Document',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('drive', models.CharField(help_text='Scope in which identifiers are unique', max_length=100)),
                ('identifier', models.CharField(help_text='Address of the document within its drive', max_length=255)),
                ('kind', models.CharField(choices=[('folder', 'Folder'), ('file', 'File')], max_length=10)),
                ('name', models.CharField(help_text='Display name, independent of the identifier', max_length=255)),
                ('parent_identifier', models.CharField(blank=True, default='', help_text='Parent folder. For files this is only the primary parent used for display, see DocumentParent for the full set.', max_length=255)),
                ('content', models.FileField(blank=True, help_text='Attachment bytes (files only)', upload_to=server.apps.filemanager.models.attachment_upload_path)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('modified_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='documents', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Document',
                'verbose_name_plural': 'Documents',
                'ordering': ['drive', 'identifier'],
                'indexes': [models.Index(fields=['drive', 'kind', 'parent_identifier'], name='documents_drive_parent_idx')],
                'constraints': [models.UniqueConstraint(fields=('drive', 'identifier'), name='documents_drive_identifier_unique')],
            },
        ),
        migrations.CreateModel(
            name='DocumentParent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('folder_identifier', models.CharField(db_index=True, max_length=255)),
                ('document', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='parent_links', to='filemanager.document')),
            ],
            options={
                'verbose_name': 'Document Parent',
                'verbose_name_plural': 'Document Parents',
                'constraints': [models.UniqueConstraint(fields=('document', 'folder_identifier'), name='document_parents_unique')],
            },
        ),
    ]
