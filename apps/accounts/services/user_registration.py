"""User registration service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model

from .exceptions import EmailInUseError, UsernameInUseError

User = get_user_model()
logger = logging.getLogger(__name__)


def ensure_unique_identity(*, email: str = None, username: str = None, exclude_user_id: str = None) -> None:
    """
    Check that email and username are free, ignoring case.

    Args:
        email: Email to check (skipped when None)
        username: Username to check (skipped when None)
        exclude_user_id: User whose own record does not count as a clash

    Raises:
        EmailInUseError: If another user has the email
        UsernameInUseError: If another user has the username
    """
    users = User.objects.all()
    if exclude_user_id is not None:
        users = users.exclude(id=exclude_user_id)

    if email is not None and users.filter(email__iexact=email).exists():
        raise EmailInUseError()
    if username is not None and users.filter(username__iexact=username).exists():
        raise UsernameInUseError()


@transaction.atomic
def register_user(
    *,
    email: str,
    username: str,
    password: str,
    first_name: str = "",
    last_name: str = ""
) -> User:
    """
    Register a new user.

    Args:
        email: User's email address (stored lowercased)
        username: Public handle, unique ignoring case
        password: User's password (will be hashed)
        first_name: Optional first name
        last_name: Optional last name

    Returns:
        Created User instance

    Raises:
        EmailInUseError: If the email is taken
        UsernameInUseError: If the username is taken
    """
    ensure_unique_identity(email=email, username=username)

    user = User.objects.create_user(
        email=email,
        username=username,
        password=password,
        first_name=first_name,
        last_name=last_name,
    )
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user
