"""Validation of file creation payloads.

Turns the loosely typed payload sent by a caller into ``FileParams``
before anything is written. Checks run in a fixed order and the first
failure wins. Whether a non-root parent exists is checked later, since
it needs a metadata lookup.
"""

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from server.apps.common.exceptions import PayloadValidationError
from server.apps.files.models import ROOT_PARENT_ID, FileType

_TRUE_VALUES: Final = ('true', '1')
_FALSE_VALUES: Final = ('false', '0', '')


@dataclass(frozen=True, slots=True)
class FileParams:
    """Normalized parameters of a file creation."""

    name: str
    file_type: FileType
    parent_id: int = ROOT_PARENT_ID
    is_public: bool = False
    data: bytes | None = None


def parse_object_id(raw_value: Any) -> int | None:
    """Parse an entity id sent by a caller.

    Accepts non-negative ints and their decimal string form.

    Returns:
        The id, None if the value cannot be an id.
    """
    if isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, int):
        return raw_value if raw_value >= 0 else None
    if isinstance(raw_value, str) and raw_value.isdigit():
        return int(raw_value)
    return None


def parse_file_params(payload: Mapping[str, Any]) -> FileParams:
    """Validate a creation payload.

    Args:
        payload: ``{name, type, parentId=0, isPublic=False, data}`` with
            ``data`` base64 encoded.

    Returns:
        Normalized FileParams with defaults applied and data decoded.

    Raises:
        PayloadValidationError: With the reason of the first failed check.
    """
    name = payload.get('name')
    if not name or not isinstance(name, str):
        raise PayloadValidationError('Missing name')

    raw_type = payload.get('type')
    if raw_type not in FileType.values:
        raise PayloadValidationError('Missing type')
    file_type = FileType(raw_type)

    data = None
    if file_type != FileType.FOLDER:
        data = _decode_data(payload.get('data'))

    return FileParams(
        name=name,
        file_type=file_type,
        parent_id=_parse_parent_id(payload.get('parentId', ROOT_PARENT_ID)),
        is_public=parse_flag(payload.get('isPublic', False)),
        data=data,
    )


def parse_flag(raw_value: Any) -> bool:
    """Parse a boolean flag sent by a caller.

    Example: True -> True, 'false' -> False, 1 -> True, None -> False

    Raises:
        PayloadValidationError: If the value is not a recognizable flag.
    """
    if raw_value is None:
        return False
    if isinstance(raw_value, bool):
        return raw_value
    if isinstance(raw_value, int) and raw_value in (0, 1):
        return bool(raw_value)
    if isinstance(raw_value, str):
        normalized = raw_value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    raise PayloadValidationError('Invalid isPublic')


def _decode_data(raw_data: Any) -> bytes:
    if not raw_data:
        raise PayloadValidationError('Missing data')
    if not isinstance(raw_data, str):
        raise PayloadValidationError('Invalid data')
    # Encoders commonly wrap base64 lines at 76 characters
    compact_data = ''.join(raw_data.split())
    try:
        return base64.b64decode(compact_data, validate=True)
    except (binascii.Error, ValueError) as error:
        raise PayloadValidationError('Invalid data') from error


def _parse_parent_id(raw_value: Any) -> int:
    if raw_value is None or raw_value == '':
        return ROOT_PARENT_ID
    parent_id = parse_object_id(raw_value)
    if parent_id is None:
        raise PayloadValidationError('Parent not found')
    return parent_id
