"""Django app configuration for file manager app."""

from typing import override

from django.apps import AppConfig


class FileManagerConfig(AppConfig):
    """Configuration for file manager app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.filemanager'
    verbose_name = 'File Manager'

    @override
    def ready(self) -> None:
        """Import signal handlers when app is ready."""
        from server.apps.filemanager import signals  # noqa: F401
