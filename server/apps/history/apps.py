"""Django app configuration for history app."""

from django.apps import AppConfig


class HistoryConfig(AppConfig):
    """Configuration for history app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.history'
    verbose_name = 'Execution history'
