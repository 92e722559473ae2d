"""Business logic for user registration and lookups."""

import logging

from django.db import DatabaseError, IntegrityError, transaction

from server.apps.common.exceptions import (
    ConflictError,
    PayloadValidationError,
    StorageError,
)
from server.apps.jobs.dispatcher import JobDispatcher, dispatcher_scope
from server.apps.users.infrastructure.passwords import hash_password
from server.apps.users.models import User

logger = logging.getLogger(__name__)


def register_user(
    email: str | None,
    password: str | None,
    *,
    dispatcher: JobDispatcher | None = None,
) -> User:
    """Create a new user and schedule the welcome notification.

    Args:
        email: Unique email address.
        password: Clear text password, stored as a SHA1 digest.
        dispatcher: Job dispatcher, built from settings if omitted.

    Returns:
        Created User instance.

    Raises:
        PayloadValidationError: If email or password is missing.
        ConflictError: If the email is already registered.
        StorageError: If the user record cannot be written.
    """
    if not email:
        raise PayloadValidationError('Missing email')
    if not password:
        raise PayloadValidationError('Missing password')

    if User.objects.filter(email=email).exists():
        logger.info('Registration rejected, email taken: %s', email)
        raise ConflictError('Already exist')

    try:
        with transaction.atomic():
            user = User.objects.create(
                email=email,
                password=hash_password(password),
            )
    except IntegrityError as error:
        # Lost a race against a concurrent registration
        logger.info('Registration rejected, email taken: %s', email)
        raise ConflictError('Already exist') from error
    except DatabaseError as error:
        logger.exception('Failed to create user: %s', email)
        raise StorageError('Error creating user.') from error

    logger.info('User created: %s (ID: %d)', email, user.id)
    with dispatcher_scope(dispatcher) as active_dispatcher:
        active_dispatcher.enqueue_welcome(user.id)
    return user


def get_user(user_id: int) -> User | None:
    """Get a user by id.

    Args:
        user_id: User id.

    Returns:
        User instance, None if it does not exist.
    """
    return User.objects.filter(id=user_id).first()


def count_users() -> int:
    """Count registered users."""
    return User.objects.count()
