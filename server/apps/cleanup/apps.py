"""Django app configuration for cleanup app."""

from django.apps import AppConfig


class CleanupConfig(AppConfig):
    """Configuration for cleanup app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.cleanup'
    verbose_name = 'Cleanup'
