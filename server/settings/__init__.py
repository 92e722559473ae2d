"""Settings for the files manager project.

Settings are split into components and assembled with
``django-split-settings``. Values come from the environment or from
``config/.env`` via ``python-decouple``.
"""

from split_settings.tools import include

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/sessions.py',
    'components/jobs.py',
)
