"""Shared fixtures for files app tests."""

import base64

import pytest

from server.apps.files.models import File, FileType


@pytest.fixture
def folder(user):
    """Create a root folder for the test user.

    Returns:
        Folder File instance.
    """
    return File.objects.create(
        user=user,
        name='docs',
        file_type=FileType.FOLDER,
    )


@pytest.fixture
def hello_payload(folder):
    """Payload creating a text file inside the folder.

    Returns:
        Creation payload.
    """
    return {
        'name': 'x.txt',
        'type': 'file',
        'data': base64.b64encode(b'hello').decode('ascii'),
        'parentId': folder.id,
    }
