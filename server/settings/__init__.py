"""Main settings file.

This file contains the list of settings components to combine
for the current environment. ``DJANGO_ENV`` selects the environment
file from ``server/settings/environments``.

See https://github.com/wemake-services/django-split-settings
"""

from os import environ

from split_settings.tools import include, optional

_ENV = environ.setdefault('DJANGO_ENV', 'development')

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    # Select the right env:
    'environments/{0}.py'.format(_ENV),
    # Optionally override some settings:
    optional('environments/local.py'),
)

# Include settings:
include(*_base_settings)
