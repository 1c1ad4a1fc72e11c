"""Django app configuration for blobs app."""

from django.apps import AppConfig


class BlobsConfig(AppConfig):
    """Configuration for blobs app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.blobs'
    verbose_name = 'Blobs'
