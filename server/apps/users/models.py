"""Database models for users app."""

from typing import Final, final, override

from django.db import models

from server.apps.users.infrastructure.passwords import (
    SHA1_HEX_LENGTH,
    check_password as check_password_digest,
)

_EMAIL_MAX_LENGTH: Final = 254


@final
class User(models.Model):
    """Registered account.

    Passwords are stored as unsalted SHA1 hex digests. The format is kept
    for compatibility with records created by earlier deployments.
    """

    email = models.EmailField(
        max_length=_EMAIL_MAX_LENGTH,
        unique=True,
    )

    password = models.CharField(
        max_length=SHA1_HEX_LENGTH,
        help_text='SHA1 hex digest of the password',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'User'  # type: ignore[mutable-override]
        verbose_name_plural = 'Users'  # type: ignore[mutable-override]
        ordering = ['id']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.email

    def check_password(self, raw_password: str) -> bool:
        """Compare a clear text password with the stored digest."""
        return check_password_digest(raw_password, self.password)

    def as_dict(self) -> dict[str, int | str]:
        """Public representation, never includes the password."""
        return {'id': self.id, 'email': self.email}
