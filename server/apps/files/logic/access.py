"""Read access rules for files."""

from server.apps.files.models import File


def can_read(file_instance: File, requester_id: int | None) -> bool:
    """Check whether a requester may fetch the content of a file.

    Public files are readable by anyone, including anonymous
    requesters. Private files only by their owner.

    Args:
        file_instance: File to read.
        requester_id: Authenticated user id, None when anonymous.

    Returns:
        True if reading is allowed.
    """
    if file_instance.is_public:
        return True
    return requester_id is not None and file_instance.user_id == requester_id
