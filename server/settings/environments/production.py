"""
This file contains all the settings used in production.

This file is required and if development.py is present these
values are overridden.
"""

from django.core.exceptions import ImproperlyConfigured

DEBUG = False

if not SECRET_KEY:  # type: ignore[name-defined]  # noqa: F821
    raise ImproperlyConfigured('DJANGO_SECRET_KEY must be set in production')
