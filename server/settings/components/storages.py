"""Local content storage configuration.

File bytes live on the local filesystem under ``FOLDER_PATH``, one
opaquely named file per stored File record. Metadata lives in the
database; the File record is the only link between the two.
"""

from typing import Final

from server.settings.components import config

# Root directory for stored content
FOLDER_PATH = config('FOLDER_PATH', default='/tmp/files_manager')

# Listing page size is part of the public contract
FILES_PAGE_SIZE: Final = 20

# Widths of pre-generated image variants, stored as <local_path>_<width>
THUMBNAIL_SIZES: Final = (500, 250, 100)
