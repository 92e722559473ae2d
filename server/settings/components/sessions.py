"""Session token storage.

Tokens live in a dedicated Django cache alias. Production points it at
Redis, local development and tests use the in-memory backend.
"""

from typing import Any, Final

from server.settings.components import config

SESSIONS_CACHE_ALIAS: Final = 'sessions'

# Token lifetime in seconds (24 hours)
SESSION_TOKEN_TTL = config('SESSION_TOKEN_TTL', cast=int, default=86400)

CACHES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    },
    SESSIONS_CACHE_ALIAS: {
        'BACKEND': config(
            'SESSIONS_CACHE_BACKEND',
            default='django.core.cache.backends.locmem.LocMemCache',
        ),
        'LOCATION': config('SESSIONS_CACHE_LOCATION', default='sessions'),
    },
}
