"""File service settings."""

from server.settings.components import config

# Name of the table holding file metadata rows
FILES_TABLE_NAME = config('FILES_TABLE_NAME', default='artifact_files')

# Any algorithm name accepted by ``hashlib.new``
FILES_DIGEST_ALGORITHM = config('FILES_DIGEST_ALGORITHM', default='sha1')

# Where uploaded streams are staged before they are stored.
# ``None`` means the system temp directory.
FILES_UPLOAD_TEMP_DIR = config('FILES_UPLOAD_TEMP_DIR', default=None)
