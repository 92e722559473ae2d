"""Database models for files app."""

from typing import Final, final, override

from django.db import models

from server.apps.users.models import User

# Parent id used by callers for the implicit root folder
ROOT_PARENT_ID: Final = 0

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_TYPE_MAX_LENGTH: Final = 16
_LOCAL_PATH_MAX_LENGTH: Final = 1024


class FileType(models.TextChoices):
    """Kinds of File entities."""

    FOLDER = 'folder', 'Folder'
    FILE = 'file', 'File'
    IMAGE = 'image', 'Image'


@final
class File(models.Model):
    """File, image or folder owned by a user.

    Entities form a tree through ``parent``: a NULL parent is the root,
    anything else must be a folder. Content of files and images lives on
    local disk at ``local_path``; folders never have content.
    """

    # Owner relationship, never reassigned
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    file_type = models.CharField(
        max_length=_TYPE_MAX_LENGTH,
        choices=FileType.choices,
    )

    is_public = models.BooleanField(default=False)

    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        related_name='children',
        null=True,
        blank=True,
        limit_choices_to={'file_type': FileType.FOLDER},
        help_text='Containing folder, NULL for the root',
    )

    local_path = models.CharField(
        max_length=_LOCAL_PATH_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Path of the content on disk, empty for folders',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['created_at', 'id']

        indexes = [
            # Optimize paginated folder listing
            models.Index(
                fields=['user', 'parent', 'created_at', 'id'],
                name='files_user_parent_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=(
                    ~models.Q(file_type=FileType.FOLDER) |
                    models.Q(local_path='')
                ),
                name='files_folder_without_content',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}:{self.name} ({self.file_type})'

    @property
    def is_folder(self) -> bool:
        """Folders organize files and carry no content."""
        return self.file_type == FileType.FOLDER

    @property
    def parent_ref(self) -> int:
        """Parent id as seen by callers, 0 for the root."""
        return self.parent_id or ROOT_PARENT_ID

    def as_dict(self) -> dict[str, int | str | bool]:
        """Metadata representation, never includes the content location."""
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'type': self.file_type,
            'isPublic': self.is_public,
            'parentId': self.parent_ref,
        }
