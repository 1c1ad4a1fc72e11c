"""Django settings shared by every environment."""

from typing import Final

from server.settings.components import config

SECRET_KEY = config('DJANGO_SECRET_KEY', default='')

INSTALLED_APPS: Final = (
    'server.apps.blobs',
)

# There is no relational store: users and tags live elsewhere,
# blobs live in the object store.
DATABASES: Final[dict[str, dict[str, str]]] = {}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
