"""Business logic for file operations."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from django.conf import settings
from django.db import DatabaseError, transaction

from server.apps.common.exceptions import (
    NotFoundError,
    PayloadValidationError,
    ServiceError,
    StorageError,
)
from server.apps.files.infrastructure.metadata import content_type_for
from server.apps.files.infrastructure.storage import (
    ContentStorage,
    get_storage,
)
from server.apps.files.logic.access import can_read
from server.apps.files.logic.validation import (
    FileParams,
    parse_file_params,
    parse_object_id,
)
from server.apps.files.models import ROOT_PARENT_ID, File, FileType
from server.apps.jobs.dispatcher import JobDispatcher, dispatcher_scope

logger = logging.getLogger(__name__)

_MAX_QUERY_OFFSET: Final = 2**63 - 1


@dataclass(frozen=True, slots=True)
class FileContent:
    """Raw content of a file with its Content-Type."""

    data: bytes
    content_type: str


def create_file(
    user_id: int,
    payload: Mapping[str, Any],
    *,
    storage: ContentStorage | None = None,
    dispatcher: JobDispatcher | None = None,
) -> File:
    """Create a folder, file or image.

    Transaction safety: content is written to disk first, then the
    metadata record is created. If the record cannot be created, the
    written content is deleted (rollback). A record never points at
    content that failed to materialize.

    Args:
        user_id: Authenticated owner.
        payload: Creation payload, see ``parse_file_params``.
        storage: Content storage, built from settings if omitted.
        dispatcher: Job dispatcher, built from settings if omitted.

    Returns:
        Created File instance.

    Raises:
        PayloadValidationError: If the payload or parent is invalid.
        StorageError: If content or metadata cannot be written.
    """
    params = parse_file_params(payload)

    storage = storage or get_storage()

    try:
        file_instance = _persist_file(user_id, params, storage)
    except ServiceError:
        if params.file_type == FileType.IMAGE:
            with dispatcher_scope(dispatcher) as active_dispatcher:
                active_dispatcher.enqueue_thumbnail(user_id=user_id)
        raise

    if file_instance.file_type == FileType.IMAGE:
        with dispatcher_scope(dispatcher) as active_dispatcher:
            active_dispatcher.enqueue_thumbnail(
                user_id=user_id,
                file_id=file_instance.id,
            )

    return file_instance


def resolve_parent(
    user_id: int,
    parent_id: int,
    *,
    lock: bool = False,
) -> File | None:
    """Find the folder new entities are created in.

    Args:
        user_id: Owner of the folder.
        parent_id: Folder id, 0 for the root.
        lock: Lock the folder row until the enclosing transaction ends.

    Returns:
        Folder instance, None for the root.

    Raises:
        PayloadValidationError: If no such folder belongs to the user.
    """
    if parent_id == ROOT_PARENT_ID:
        return None

    queryset = File.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    parent = queryset.filter(
        id=parent_id,
        user_id=user_id,
        file_type=FileType.FOLDER,
    ).first()
    if parent is None:
        logger.info('Parent folder not found: ID=%d', parent_id)
        raise PayloadValidationError('Parent not found')
    return parent


def _persist_file(
    user_id: int,
    params: FileParams,
    storage: ContentStorage,
) -> File:
    # Reject an unknown parent before anything is written
    resolve_parent(user_id, params.parent_id)

    if params.file_type == FileType.FOLDER:
        return _create_record(user_id, params, local_path='')

    # Step 1: Write content to disk first
    local_path = storage.store(params.data or b'')

    # Step 2: Create database record
    try:
        return _create_record(user_id, params, local_path)
    except ServiceError:
        storage.rollback_upload(local_path)
        raise


def _create_record(
    user_id: int,
    params: FileParams,
    local_path: str,
) -> File:
    try:
        with transaction.atomic():
            parent = resolve_parent(user_id, params.parent_id, lock=True)
            file_instance = File.objects.create(
                user_id=user_id,
                name=params.name,
                file_type=params.file_type,
                is_public=params.is_public,
                parent=parent,
                local_path=local_path,
            )
    except DatabaseError as error:
        logger.exception('Failed to create file record: %s', params.name)
        raise StorageError('Cannot save file') from error

    logger.info(
        'File record created: %s (ID: %d, type: %s)',
        file_instance.name,
        file_instance.id,
        file_instance.file_type,
    )
    return file_instance


def get_file(user_id: int, file_id: Any) -> File:
    """Get a file owned by the user.

    Files of other users are reported exactly like missing ones.

    Args:
        user_id: Authenticated requester.
        file_id: File id as sent by the caller.

    Returns:
        File instance.

    Raises:
        NotFoundError: If the user owns no file with this id.
    """
    parsed_id = parse_object_id(file_id)
    if parsed_id is None:
        raise NotFoundError()

    file_instance = File.objects.filter(id=parsed_id, user_id=user_id).first()
    if file_instance is None:
        raise NotFoundError()
    return file_instance


def normalize_page(raw_page: Any) -> int:
    """Turn a page query value into a non-negative page number.

    Example: '2' -> 2, 'abc' -> 0, -1 -> 0
    """
    try:
        page = int(raw_page)
    except (TypeError, ValueError):
        return 0
    return max(page, 0)


def list_files(
    user_id: int,
    parent_id: Any = ROOT_PARENT_ID,
    page: Any = 0,
) -> list[File]:
    """List one page of the user's entities in a folder.

    Pages hold ``FILES_PAGE_SIZE`` entries in creation order. An unknown
    parent, or one that is not a folder, yields an empty page rather
    than an error.

    Args:
        user_id: Authenticated owner.
        parent_id: Folder id, 0 for the root.
        page: Page number, normalized by ``normalize_page``.

    Returns:
        Files of the requested page.
    """
    page_number = normalize_page(page)
    page_size = settings.FILES_PAGE_SIZE

    if parent_id is None or parent_id == '':
        parent_id = ROOT_PARENT_ID
    parsed_parent_id = parse_object_id(parent_id)
    if parsed_parent_id is None:
        return []

    queryset = File.objects.filter(user_id=user_id)
    if parsed_parent_id == ROOT_PARENT_ID:
        queryset = queryset.filter(parent__isnull=True)
    else:
        folder_exists = File.objects.filter(
            id=parsed_parent_id,
            user_id=user_id,
            file_type=FileType.FOLDER,
        ).exists()
        if not folder_exists:
            logger.debug('Listing unknown folder: ID=%d', parsed_parent_id)
            return []
        queryset = queryset.filter(parent_id=parsed_parent_id)

    offset = page_number * page_size
    if offset + page_size > _MAX_QUERY_OFFSET:
        # Databases reject offsets wider than a signed 64-bit integer
        return []
    return list(
        queryset.order_by('created_at', 'id')[offset:offset + page_size],
    )


def set_visibility(
    user_id: int,
    file_id: Any,
    is_public: bool,
    *,
    dispatcher: JobDispatcher | None = None,
) -> File:
    """Publish or unpublish a file owned by the user.

    Args:
        user_id: Authenticated owner.
        file_id: File id as sent by the caller.
        is_public: New visibility.
        dispatcher: Job dispatcher, built from settings if omitted.

    Returns:
        Updated File instance.

    Raises:
        NotFoundError: If the user owns no file with this id.
    """
    parsed_id = parse_object_id(file_id)
    if parsed_id is None:
        raise NotFoundError()

    with transaction.atomic():
        file_instance = (
            File.objects.select_for_update()
            .filter(id=parsed_id, user_id=user_id)
            .first()
        )
        if file_instance is None:
            raise NotFoundError()

        file_instance.is_public = is_public
        file_instance.save(update_fields=['is_public'])

    logger.info(
        'File visibility changed: ID=%d, public=%s',
        file_instance.id,
        is_public,
    )

    if file_instance.file_type == FileType.IMAGE:
        with dispatcher_scope(dispatcher) as active_dispatcher:
            active_dispatcher.enqueue_thumbnail(
                user_id=user_id,
                file_id=file_instance.id,
            )

    return file_instance


def publish_file(
    user_id: int,
    file_id: Any,
    *,
    dispatcher: JobDispatcher | None = None,
) -> File:
    """Make a file readable by anyone."""
    return set_visibility(user_id, file_id, True, dispatcher=dispatcher)


def unpublish_file(
    user_id: int,
    file_id: Any,
    *,
    dispatcher: JobDispatcher | None = None,
) -> File:
    """Make a file readable by its owner only."""
    return set_visibility(user_id, file_id, False, dispatcher=dispatcher)


def get_file_content(
    file_id: Any,
    requester_id: int | None = None,
    size: Any = None,
    *,
    storage: ContentStorage | None = None,
) -> FileContent:
    """Fetch the raw content of a file.

    Private files of other users are reported exactly like missing ones.

    Args:
        file_id: File id as sent by the caller.
        requester_id: Authenticated user id, None when anonymous.
        size: Optional thumbnail width for images.
        storage: Content storage, built from settings if omitted.

    Returns:
        Content bytes with a Content-Type derived from the file name.

    Raises:
        NotFoundError: If the file is missing, hidden or has no bytes.
        PayloadValidationError: If the file is a folder or size is invalid.
    """
    parsed_id = parse_object_id(file_id)
    if parsed_id is None:
        raise NotFoundError()

    file_instance = File.objects.filter(id=parsed_id).first()
    if file_instance is None or not can_read(file_instance, requester_id):
        raise NotFoundError()

    if file_instance.is_folder:
        raise PayloadValidationError("A folder doesn't have content")

    variant = _parse_size(size)
    storage = storage or get_storage()
    data = storage.read(file_instance.local_path, variant)

    return FileContent(
        data=data,
        content_type=content_type_for(file_instance.name),
    )


def _parse_size(raw_size: Any) -> int | None:
    if raw_size is None or raw_size in ('', 0, '0'):
        return None
    try:
        size = int(raw_size)
    except (TypeError, ValueError) as error:
        raise PayloadValidationError('Invalid size') from error
    if size not in settings.THUMBNAIL_SIZES:
        raise PayloadValidationError('Invalid size')
    return size


def count_files() -> int:
    """Count all stored entities, folders included."""
    return File.objects.count()
