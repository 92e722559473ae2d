"""Tests for file creation and lookups."""

import base64
from pathlib import Path
from unittest import mock

import pytest
from django.db import DatabaseError

from server.apps.common.exceptions import (
    NotFoundError,
    PayloadValidationError,
    StorageError,
)
from server.apps.files.logic.file_operations import create_file, get_file
from server.apps.files.models import File, FileType
from server.apps.jobs.infrastructure.queues import RedisJobQueue


@pytest.mark.django_db
def test_create_folder_at_root(user, storage, dispatcher, content_root):
    """Test folder creation stores metadata only."""
    folder = create_file(
        user.id,
        {'name': 'docs', 'type': 'folder'},
        storage=storage,
        dispatcher=dispatcher,
    )

    assert folder.as_dict() == {
        'id': folder.id,
        'userId': user.id,
        'name': 'docs',
        'type': 'folder',
        'isPublic': False,
        'parentId': 0,
    }
    assert folder.local_path == ''
    # Nothing written to disk
    assert not content_root.exists() or not any(content_root.iterdir())


@pytest.mark.django_db
def test_create_file_in_folder(user, folder, hello_payload, storage, dispatcher):
    """Test file content lands on disk and metadata points at it."""
    file_instance = create_file(
        user.id,
        hello_payload,
        storage=storage,
        dispatcher=dispatcher,
    )

    assert file_instance.parent_ref == folder.id
    assert file_instance.file_type == FileType.FILE
    assert Path(file_instance.local_path).read_bytes() == b'hello'
    assert Path(file_instance.local_path).parent == Path(storage.location)


@pytest.mark.django_db
def test_create_file_unique_paths(user, storage, dispatcher):
    """Test two uploads with the same name never share a path."""
    payload = {'name': 'same.txt', 'type': 'file', 'data': 'aGVsbG8='}

    first = create_file(user.id, payload, storage=storage, dispatcher=dispatcher)
    second = create_file(user.id, payload, storage=storage, dispatcher=dispatcher)

    assert first.local_path != second.local_path


@pytest.mark.django_db
def test_create_round_trip(user, storage, dispatcher):
    """Test a created file reads back with defaults applied."""
    created = create_file(
        user.id,
        {'name': 'a.bin', 'type': 'file', 'data': 'AAEC'},
        storage=storage,
        dispatcher=dispatcher,
    )

    fetched = get_file(user.id, created.id)

    assert fetched.as_dict() == created.as_dict()
    assert fetched.parent_ref == 0
    assert fetched.is_public is False


@pytest.mark.django_db
def test_create_image_enqueues_thumbnail(
    user,
    storage,
    dispatcher,
    job_queue,
    png_base64,
):
    """Test image uploads schedule thumbnail generation."""
    image = create_file(
        user.id,
        {'name': 'photo.png', 'type': 'image', 'data': png_base64},
        storage=storage,
        dispatcher=dispatcher,
    )

    assert job_queue.payloads('fileQueue') == [
        {'userId': str(user.id), 'fileId': str(image.id)},
    ]


@pytest.mark.django_db
def test_create_file_does_not_enqueue(user, storage, dispatcher, job_queue):
    """Test plain files schedule nothing."""
    create_file(
        user.id,
        {'name': 'x.txt', 'type': 'file', 'data': 'aGVsbG8='},
        storage=storage,
        dispatcher=dispatcher,
    )

    assert job_queue.jobs == []


@pytest.mark.django_db
def test_create_with_unknown_parent(user, storage, dispatcher, content_root):
    """Test unknown parent is rejected before anything is written."""
    with pytest.raises(PayloadValidationError, match='Parent not found'):
        create_file(
            user.id,
            {
                'name': 'x.txt',
                'type': 'file',
                'data': 'aGVsbG8=',
                'parentId': 999,
            },
            storage=storage,
            dispatcher=dispatcher,
        )

    assert File.objects.count() == 0
    assert not content_root.exists() or not any(content_root.iterdir())


@pytest.mark.django_db
def test_create_with_file_as_parent(user, storage, dispatcher):
    """Test a non-folder parent is rejected."""
    plain = create_file(
        user.id,
        {'name': 'x.txt', 'type': 'file', 'data': 'aGVsbG8='},
        storage=storage,
        dispatcher=dispatcher,
    )

    with pytest.raises(PayloadValidationError, match='Parent not found'):
        create_file(
            user.id,
            {'name': 'inner', 'type': 'folder', 'parentId': plain.id},
            storage=storage,
            dispatcher=dispatcher,
        )

    assert File.objects.count() == 1


@pytest.mark.django_db
def test_create_in_folder_of_other_user(other_user, folder, storage, dispatcher):
    """Test folders of other users cannot be written into."""
    with pytest.raises(PayloadValidationError, match='Parent not found'):
        create_file(
            other_user.id,
            {'name': 'inner', 'type': 'folder', 'parentId': folder.id},
            storage=storage,
            dispatcher=dispatcher,
        )


@pytest.mark.django_db
def test_create_validation_error_writes_nothing(user, storage, dispatcher):
    """Test invalid payloads leave no record."""
    with pytest.raises(PayloadValidationError, match='Missing data'):
        create_file(
            user.id,
            {'name': 'x.txt', 'type': 'file'},
            storage=storage,
            dispatcher=dispatcher,
        )

    assert File.objects.count() == 0


@pytest.mark.django_db
def test_storage_failure_leaves_no_record(user, storage, dispatcher):
    """Test a failed content write creates no metadata."""
    with mock.patch.object(storage, 'save', side_effect=OSError('disk full')):
        with pytest.raises(StorageError) as exc_info:
            create_file(
                user.id,
                {'name': 'x.txt', 'type': 'file', 'data': 'aGVsbG8='},
                storage=storage,
                dispatcher=dispatcher,
            )

    assert exc_info.value.is_client_error is False
    assert 'disk full' not in exc_info.value.reason
    assert File.objects.count() == 0


@pytest.mark.django_db
def test_metadata_failure_rolls_back_content(
    user,
    storage,
    dispatcher,
    content_root,
):
    """Test content is deleted when the record cannot be created."""
    with mock.patch.object(
        File.objects,
        'create',
        side_effect=DatabaseError('db down'),
    ):
        with pytest.raises(StorageError):
            create_file(
                user.id,
                {'name': 'x.txt', 'type': 'file', 'data': 'aGVsbG8='},
                storage=storage,
                dispatcher=dispatcher,
            )

    assert File.objects.count() == 0
    assert list(content_root.iterdir()) == []


@pytest.mark.django_db
def test_failed_image_upload_reports_job(user, storage, dispatcher, job_queue):
    """Test a failed image upload enqueues a job without file id."""
    with mock.patch.object(storage, 'save', side_effect=OSError('disk full')):
        with pytest.raises(StorageError):
            create_file(
                user.id,
                {
                    'name': 'photo.png',
                    'type': 'image',
                    'data': base64.b64encode(b'png').decode('ascii'),
                },
                storage=storage,
                dispatcher=dispatcher,
            )

    assert job_queue.payloads('fileQueue') == [{'userId': str(user.id)}]


@pytest.mark.django_db
def test_enqueue_failure_does_not_fail_upload(user, storage, png_base64):
    """Test a broken queue does not turn a success into a failure."""
    broken_dispatcher = mock.Mock()
    broken_dispatcher.enqueue_thumbnail.return_value = False

    image = create_file(
        user.id,
        {'name': 'photo.png', 'type': 'image', 'data': png_base64},
        storage=storage,
        dispatcher=broken_dispatcher,
    )

    assert File.objects.filter(id=image.id).exists()
    broken_dispatcher.enqueue_thumbnail.assert_called_once_with(
        user_id=user.id,
        file_id=image.id,
    )


@pytest.mark.django_db
def test_get_file_owner(user, folder):
    """Test owner can read metadata."""
    assert get_file(user.id, folder.id) == folder
    assert get_file(user.id, str(folder.id)) == folder


@pytest.mark.django_db
def test_get_file_hidden_from_other_user(other_user, folder):
    """Test other users get the same error as for a missing file."""
    with pytest.raises(NotFoundError) as hidden:
        get_file(other_user.id, folder.id)
    with pytest.raises(NotFoundError) as missing:
        get_file(other_user.id, 999999)

    assert hidden.value.as_dict() == missing.value.as_dict()
    assert hidden.value.status_code == missing.value.status_code


@pytest.mark.django_db
def test_get_file_invalid_id(user):
    """Test malformed ids are reported as not found."""
    with pytest.raises(NotFoundError):
        get_file(user.id, 'not-an-id')


@pytest.mark.django_db
def test_parent_checked_again_inside_transaction(
    user,
    folder,
    storage,
    dispatcher,
    content_root,
):
    """Test a parent gone before the insert rejects the file and its content."""
    with mock.patch(
        'server.apps.files.logic.file_operations.resolve_parent',
        side_effect=[folder, PayloadValidationError('Parent not found')],
    ) as resolve_parent:
        with pytest.raises(PayloadValidationError, match='Parent not found'):
            create_file(
                user.id,
                {
                    'name': 'x.txt',
                    'type': 'file',
                    'data': 'aGVsbG8=',
                    'parentId': folder.id,
                },
                storage=storage,
                dispatcher=dispatcher,
            )

    assert resolve_parent.call_args_list == [
        mock.call(user.id, folder.id),
        mock.call(user.id, folder.id, lock=True),
    ]
    assert File.objects.count() == 1
    assert list(content_root.iterdir()) == []


@pytest.mark.django_db
def test_create_with_wrapped_base64(user, storage, dispatcher):
    """Test line-wrapped base64 content is stored decoded."""
    content = b'x' * 100

    created = create_file(
        user.id,
        {
            'name': 'x.txt',
            'type': 'file',
            'data': base64.encodebytes(content).decode('ascii'),
        },
        storage=storage,
        dispatcher=dispatcher,
    )

    assert Path(created.local_path).read_bytes() == content


@pytest.mark.django_db
def test_create_image_closes_built_dispatcher(user, storage, png_base64):
    """Test the queue connection opened for an upload is released."""
    with mock.patch.object(RedisJobQueue, 'from_url') as from_url:
        create_file(
            user.id,
            {'name': 'photo.png', 'type': 'image', 'data': png_base64},
            storage=storage,
        )

    from_url.return_value.push.assert_called_once()
    from_url.return_value.close.assert_called_once_with()
