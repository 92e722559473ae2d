"""Django app configuration for jobs app."""

from django.apps import AppConfig


class JobsConfig(AppConfig):
    """Configuration for jobs app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.jobs'
    verbose_name = 'Jobs'
