"""Error taxonomy shared by all apps.

Every error carries a short human readable ``reason`` and a status
classification. Callers pass ``as_dict()`` and ``status_code`` back to the
client verbatim; internal exception text is never part of the reason.
"""

from typing import ClassVar, Final, override

_DEFAULT_REASON: Final = 'Internal error'


class ServiceError(Exception):
    """Base class for errors reported to the caller."""

    status_code: ClassVar[int] = 500
    default_reason: ClassVar[str] = _DEFAULT_REASON

    def __init__(self, reason: str | None = None) -> None:
        """Initialize ServiceError.

        Args:
            reason: Message shown to the caller, defaults per class.
        """
        self.reason = reason or self.default_reason
        super().__init__(self.reason)

    @property
    def is_client_error(self) -> bool:
        """Tell whether the caller can fix the request."""
        return self.status_code < 500

    def as_dict(self) -> dict[str, str]:
        """Structured payload for the caller."""
        return {'error': self.reason}

    @override
    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.reason!r})'


class PayloadValidationError(ServiceError):
    """Malformed or missing input. Never retried."""

    status_code = 400
    default_reason = 'Invalid payload'


class UnauthorizedError(ServiceError):
    """Missing, expired or dangling session token."""

    status_code = 401
    default_reason = 'Unauthorized'


class NotFoundError(ServiceError):
    """Entity absent, or present but hidden from the requester."""

    status_code = 404
    default_reason = 'Not found'


class ConflictError(ServiceError):
    """Entity with the same unique key already exists."""

    status_code = 400
    default_reason = 'Already exist'


class StorageError(ServiceError):
    """Disk or database failure while writing content or metadata."""

    status_code = 500
    default_reason = 'Cannot store file'
