"""Main settings file, assembled from ``components``.

Order matters: later components may read values set by earlier ones.
"""

from split_settings.tools import include

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/files.py',
    'components/cleanup.py',
)
