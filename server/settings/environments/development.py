"""
This file contains all the settings that defines the development server.

SECURITY WARNING: don't run with debug turned on in production!
"""

from django.core.management.utils import get_random_secret_key

DEBUG = True

# Throwaway key so a fresh checkout boots without `config/.env`
if not SECRET_KEY:  # type: ignore[name-defined]  # noqa: F821
    SECRET_KEY = get_random_secret_key()
