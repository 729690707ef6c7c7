"""Account management service."""

import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.contrib.auth import get_user_model

from apps.groups.models import Group

from .exceptions import (
    UserNotFoundError,
    InsufficientPermissionsError,
    GroupOwnerDeletionError,
)
from .user_registration import ensure_unique_identity

User = get_user_model()
logger = logging.getLogger(__name__)


def get_user_by_id(*, user_id: str) -> User:
    """
    Fetch a user by primary key.

    Raises:
        UserNotFoundError: If no such user exists
    """
    try:
        return User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError()


def get_own_user(*, user_id: str, requested_by: User) -> User:
    """Return the user record, which only its owner may read."""
    user = get_user_by_id(user_id=user_id)
    if user.pk != requested_by.pk:
        raise InsufficientPermissionsError("You can only view your own user record")
    return user


@transaction.atomic
def update_user(
    *,
    user_id: str,
    updated_by: User,
    email: Optional[str] = None,
    username: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None
) -> User:
    """
    Update a user's own profile.

    Args:
        user_id: ID of the user to update
        updated_by: User performing the update (must be the same user)
        email: New email, unique ignoring case
        username: New username, unique ignoring case
        first_name: New first name
        last_name: New last name

    Returns:
        Updated User instance

    Raises:
        UserNotFoundError: If the user doesn't exist
        InsufficientPermissionsError: If updating someone else
        EmailInUseError: If the email belongs to another user
        UsernameInUseError: If the username belongs to another user
    """
    user = get_user_by_id(user_id=user_id)
    if user.pk != updated_by.pk:
        raise InsufficientPermissionsError("can only update your own user")

    ensure_unique_identity(email=email, username=username, exclude_user_id=user.pk)

    if email is not None:
        user.email = User.objects.normalize_email(email)
    if username is not None:
        user.username = username
    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    user.save()

    logger.info("Updated user %s", user.pk)
    return user


@transaction.atomic
def delete_user(*, user_id: str, deleted_by: User) -> None:
    """
    Delete a user's own account.

    Memberships are deleted with the account. Transactions and their details
    are kept with payer, creator and recipient cleared.

    Raises:
        UserNotFoundError: If the user doesn't exist
        InsufficientPermissionsError: If deleting someone else
        GroupOwnerDeletionError: If the user still owns a group
    """
    user = get_user_by_id(user_id=user_id)
    if user.pk != deleted_by.pk:
        raise InsufficientPermissionsError("you can only delete your own user record")

    if Group.objects.filter(created_by=user).exists():
        raise GroupOwnerDeletionError()

    user.delete()
    logger.info("Deleted user %s", user_id)


def search_users(*, query: str, requested_by: User, limit: Optional[int] = None) -> QuerySet:
    """
    Find users whose username or name contains ``query``, ignoring case.

    The requesting user is never part of the results.
    """
    query = (query or '').strip()
    if not query:
        return User.objects.none()

    if limit is None:
        limit = settings.USER_SEARCH_LIMIT

    return (
        User.objects
        .filter(is_active=True)
        .filter(
            Q(username__icontains=query)
            | Q(first_name__icontains=query)
            | Q(last_name__icontains=query)
        )
        .exclude(id=requested_by.pk)
        .order_by('username')[:limit]
    )
