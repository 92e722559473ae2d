"""Password digests."""

import hashlib
import hmac
from typing import Final

SHA1_HEX_LENGTH: Final = 40


def hash_password(raw_password: str) -> str:
    """Return the SHA1 hex digest of a password.

    Args:
        raw_password: Clear text password.

    Returns:
        40 character lowercase hex string.
    """
    return hashlib.sha1(raw_password.encode('utf-8')).hexdigest()  # noqa: S324


def check_password(raw_password: str, digest: str) -> bool:
    """Check a clear text password against a stored digest.

    Args:
        raw_password: Clear text password.
        digest: Stored SHA1 hex digest.

    Returns:
        True if they match.
    """
    return hmac.compare_digest(hash_password(raw_password), digest)
