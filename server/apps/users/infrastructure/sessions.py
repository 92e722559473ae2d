"""Session token store.

Maps an opaque token to a user id with a fixed lifetime. Expiry is
delegated to the cache backend TTL, so an expired token simply reads
as missing.
"""

import logging
from typing import Final, final

from django.conf import settings
from django.core.cache import BaseCache, caches

logger = logging.getLogger(__name__)

_KEY_PREFIX: Final = 'auth_'


@final
class SessionStore:
    """Token to user id mapping stored in a Django cache."""

    def __init__(self, cache: BaseCache, ttl: int) -> None:
        """Initialize the store.

        Args:
            cache: Cache backend holding the tokens.
            ttl: Token lifetime in seconds.
        """
        self._cache = cache
        self._ttl = ttl

    def get(self, token: str) -> int | None:
        """Return the user id for a token, None if unknown or expired."""
        user_id = self._cache.get(self._key(token))
        if user_id is None:
            return None
        return int(user_id)

    def set(self, token: str, user_id: int) -> None:
        """Store a token for a user."""
        self._cache.set(self._key(token), user_id, timeout=self._ttl)
        logger.debug('Session stored: %s', token[:8])

    def delete(self, token: str) -> bool:
        """Remove a token.

        Returns:
            True if the token existed.
        """
        return bool(self._cache.delete(self._key(token)))

    def _key(self, token: str) -> str:
        return f'{_KEY_PREFIX}{token}'


def get_session_store() -> SessionStore:
    """Build the session store configured in settings.

    Returns:
        SessionStore over the sessions cache alias.
    """
    return SessionStore(
        cache=caches[settings.SESSIONS_CACHE_ALIAS],
        ttl=settings.SESSION_TOKEN_TTL,
    )
