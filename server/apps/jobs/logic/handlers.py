"""Handlers for background jobs.

Each handler receives the decoded job payload. Ids travel as strings.
A job that cannot be processed raises ``JobError``; the worker logs it
and moves on to the next job.
"""

import logging
from collections.abc import Iterable

from django.conf import settings
from PIL import Image

from server.apps.files.models import File, FileType
from server.apps.jobs.infrastructure.queues import JobPayload
from server.apps.jobs.infrastructure.thumbnails import generate_thumbnails
from server.apps.users.models import User

logger = logging.getLogger(__name__)


class JobError(Exception):
    """Raised when a job cannot be processed."""


def _require_id(payload: JobPayload, key: str) -> int:
    raw_value = payload.get(key)
    if raw_value is None or raw_value == '':
        raise JobError(f'Missing {key}')
    try:
        return int(raw_value)
    except (TypeError, ValueError) as error:
        raise JobError(f'Invalid {key}') from error


def process_thumbnail_job(
    payload: JobPayload,
    widths: Iterable[int] | None = None,
) -> list[str]:
    """Generate the size variants of an uploaded image.

    Args:
        payload: ``{'fileId': ..., 'userId': ...}``.
        widths: Variant widths, defaults to ``THUMBNAIL_SIZES``.

    Returns:
        Paths of the generated variants.

    Raises:
        JobError: If ids are missing, the image is unknown or unreadable.
    """
    file_id = _require_id(payload, 'fileId')
    user_id = _require_id(payload, 'userId')

    file_instance = File.objects.filter(
        id=file_id,
        user_id=user_id,
        file_type=FileType.IMAGE,
    ).first()
    if file_instance is None:
        raise JobError('File not found')

    try:
        return generate_thumbnails(
            file_instance.local_path,
            widths or settings.THUMBNAIL_SIZES,
        )
    except (OSError, Image.DecompressionBombError) as error:
        logger.exception(
            'Cannot generate thumbnails for file %d',
            file_instance.id,
        )
        raise JobError('Cannot generate thumbnails') from error


def process_welcome_job(payload: JobPayload) -> User:
    """Greet a newly registered user.

    Args:
        payload: ``{'userId': ...}``.

    Returns:
        The greeted user.

    Raises:
        JobError: If the id is missing or the user is unknown.
    """
    user_id = _require_id(payload, 'userId')

    user = User.objects.filter(id=user_id).first()
    if user is None:
        raise JobError('User not found')

    logger.info('Welcome %s!', user.email)
    return user
