"""Metadata helpers for stored content."""

import mimetypes
from typing import Final

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'
_TEXT_CHARSET: Final = 'utf-8'


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from the filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def content_type_for(filename: str) -> str:
    """Build a Content-Type value for a file name.

    Text types get an explicit charset.

    Example: 'notes.txt' -> 'text/plain; charset=utf-8'
    """
    mime_type = detect_mime_type(filename)
    if mime_type.startswith('text/'):
        return f'{mime_type}; charset={_TEXT_CHARSET}'
    return mime_type
