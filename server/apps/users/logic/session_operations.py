"""Business logic for session tokens.

A token is issued on sign in and resolves to a user id until it expires
or the user signs out. Every authenticated operation starts with
``authenticate``.
"""

import logging
import uuid

from server.apps.common.exceptions import UnauthorizedError
from server.apps.users.infrastructure.sessions import (
    SessionStore,
    get_session_store,
)
from server.apps.users.logic.user_operations import get_user
from server.apps.users.models import User

logger = logging.getLogger(__name__)


def sign_in(
    email: str | None,
    password: str | None,
    *,
    sessions: SessionStore | None = None,
) -> str:
    """Issue a session token for valid credentials.

    Args:
        email: Registered email.
        password: Clear text password.
        sessions: Session store, built from settings if omitted.

    Returns:
        New opaque token.

    Raises:
        UnauthorizedError: If the credentials do not match a user.
    """
    if not email or not password:
        raise UnauthorizedError()

    user = User.objects.filter(email=email).first()
    if user is None or not user.check_password(password):
        logger.warning('Sign in failed for: %s', email)
        raise UnauthorizedError()

    sessions = sessions or get_session_store()
    token = str(uuid.uuid4())
    sessions.set(token, user.id)

    logger.info('User signed in: %s (ID: %d)', email, user.id)
    return token


def authenticate(
    token: str | None,
    *,
    sessions: SessionStore | None = None,
) -> int:
    """Resolve a token to the id of an existing user.

    Unknown tokens, expired tokens and tokens of deleted users are
    reported the same way.

    Args:
        token: Token presented by the caller.
        sessions: Session store, built from settings if omitted.

    Returns:
        Id of the authenticated user.

    Raises:
        UnauthorizedError: If the token does not resolve to a user.
    """
    if not token:
        raise UnauthorizedError()

    sessions = sessions or get_session_store()
    user_id = sessions.get(token)
    if user_id is None or not User.objects.filter(id=user_id).exists():
        raise UnauthorizedError()

    return user_id


def get_current_user(
    token: str | None,
    *,
    sessions: SessionStore | None = None,
) -> User:
    """Get the user a token belongs to.

    Raises:
        UnauthorizedError: If the token does not resolve to a user.
    """
    user = get_user(authenticate(token, sessions=sessions))
    if user is None:
        raise UnauthorizedError()
    return user


def sign_out(
    token: str | None,
    *,
    sessions: SessionStore | None = None,
) -> None:
    """Revoke a session token.

    Args:
        token: Token to revoke.
        sessions: Session store, built from settings if omitted.

    Raises:
        UnauthorizedError: If the token does not resolve to a user.
    """
    sessions = sessions or get_session_store()
    user_id = authenticate(token, sessions=sessions)
    sessions.delete(token)
    logger.info('User signed out (ID: %d)', user_id)
