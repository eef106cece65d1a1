"""Main settings file.

All component settings are included from ``components/``,
values that differ between environments come from ``config/.env``.
"""

from split_settings.tools import include, optional

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/filemanager.py',
    # Local overrides, never committed
    optional('components/local.py'),
)
