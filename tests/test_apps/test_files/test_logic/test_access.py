"""Tests for read access rules."""

import pytest

from server.apps.files.logic.access import can_read
from server.apps.files.models import File, FileType


@pytest.fixture
def private_file(user):
    """Private file of the test user.

    Returns:
        File instance.
    """
    return File.objects.create(
        user=user,
        name='secret.txt',
        file_type=FileType.FILE,
        local_path='/tmp/secret',
    )


@pytest.mark.django_db
def test_owner_reads_private_file(user, private_file):
    """Test owner can read a private file."""
    assert can_read(private_file, user.id)


@pytest.mark.django_db
def test_other_user_cannot_read_private_file(other_user, private_file):
    """Test private files are hidden from other users."""
    assert not can_read(private_file, other_user.id)


@pytest.mark.django_db
def test_anonymous_cannot_read_private_file(private_file):
    """Test private files are hidden from anonymous requesters."""
    assert not can_read(private_file, None)


@pytest.mark.django_db
def test_public_file_readable_by_anyone(other_user, private_file):
    """Test public files are readable by everyone."""
    private_file.is_public = True

    assert can_read(private_file, other_user.id)
    assert can_read(private_file, None)
