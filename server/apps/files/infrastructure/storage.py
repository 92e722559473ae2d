"""Local filesystem storage for file content."""

import logging
import uuid
from pathlib import Path
from typing import Any, final, override

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import FileSystemStorage

from server.apps.common.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)


def variant_path(local_path: str, size: int) -> str:
    """Path of a size variant of stored content.

    Example: '/tmp/files_manager/3f2a...' -> '/tmp/files_manager/3f2a..._250'
    """
    return f'{local_path}_{size}'


@final
class ContentStorage(FileSystemStorage):
    """Filesystem storage for user content.

    Extends Django's FileSystemStorage with:
    - Opaque unique names so concurrent uploads never collide
    - Transaction rollback support for failed DB operations
    - Enhanced error logging
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str | None,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save content to disk with error handling and logging.

        Args:
            name: Storage name for the content.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage name used.

        Raises:
            OSError: If the write fails.
        """
        try:
            logger.debug('Writing content to storage: %s', name)
            saved_name = super().save(name, content, max_length)
        except OSError:
            logger.exception('Failed to write content to storage: %s', name)
            raise
        else:
            return saved_name

    def store(self, data: bytes) -> str:
        """Write bytes under a fresh unique name.

        The storage root is created if it does not exist yet.

        Args:
            data: Decoded content.

        Returns:
            Absolute path of the written content.

        Raises:
            StorageError: If the content cannot be written.
        """
        name = str(uuid.uuid4())
        try:
            saved_name = self.save(name, ContentFile(data))
        except OSError as error:
            raise StorageError('Cannot store file') from error

        local_path = self.path(saved_name)
        logger.info('Stored %d bytes at %s', len(data), local_path)
        return local_path

    def read(self, local_path: str, size: int | None = None) -> bytes:
        """Read stored content or one of its size variants.

        Args:
            local_path: Path returned by ``store``.
            size: Variant selector, None for the original.

        Returns:
            Content bytes.

        Raises:
            NotFoundError: If nothing is stored at the path.
            StorageError: If the content cannot be read.
        """
        path = variant_path(local_path, size) if size else local_path
        try:
            return Path(path).read_bytes()
        except FileNotFoundError as error:
            logger.warning('Content missing on disk: %s', path)
            raise NotFoundError() from error
        except OSError as error:
            logger.exception('Failed to read content: %s', path)
            raise StorageError('Cannot read file') from error

    def rollback_upload(self, local_path: str) -> None:
        """Delete stored content after a failed metadata write.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised, the caller is already failing.

        Args:
            local_path: Path returned by ``store``.
        """
        try:
            logger.warning('Rolling back upload, deleting: %s', local_path)
            Path(local_path).unlink(missing_ok=True)
        except OSError:
            # The content stays on disk without a record pointing to it
            logger.exception(
                'Failed to rollback upload, orphaned content: %s',
                local_path,
            )


def get_storage() -> ContentStorage:
    """Build the content storage rooted at ``FOLDER_PATH``."""
    return ContentStorage(location=settings.FOLDER_PATH)
