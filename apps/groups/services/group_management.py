"""
Group management service.

Handles group CRUD operations with proper transaction safety.
"""

import logging
from typing import Iterable, Optional

from django.db import transaction
from django.db.models import Prefetch, QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus
from apps.transactions.models import Transaction, TransactionDetail

from .exceptions import (
    InsufficientPermissionsError,
    InvalidGroupDataError,
)
from .lookups import get_group_by_id
from .membership_management import invite_users

logger = logging.getLogger(__name__)


def _members_prefetch() -> Prefetch:
    return Prefetch(
        'group_members',
        queryset=GroupMember.objects.select_related('member').order_by('created_at', 'id'),
    )


def _transactions_prefetch() -> Prefetch:
    return Prefetch(
        'transactions',
        queryset=(
            Transaction.objects
            .select_related('created_by', 'payer')
            .prefetch_related(
                Prefetch(
                    'transaction_details',
                    queryset=TransactionDetail.objects.select_related('recipient').order_by('id'),
                )
            )
            .order_by('created_at', 'id')
        ),
    )


@transaction.atomic
def create_group(
    *,
    name: str,
    created_by: User,
    description: str = '',
    invited_members: Optional[Iterable[dict]] = None
) -> Group:
    """
    Create a new group with the creator as a Joined admin.

    This is a multi-step operation wrapped in a transaction:
    1. Create the group
    2. Create the creator's membership
    3. Invite the requested members, all or nothing

    Args:
        name: Group name (1-50 characters)
        created_by: User who will own the group
        description: Optional group description
        invited_members: Optional ``{'id': ..., 'role': 'admin'|'member'}`` dicts

    Returns:
        Created Group instance

    Raises:
        GroupsServiceError: If any invite is rejected (see ``invite_users``)
    """
    group = Group.objects.create(
        name=name,
        description=description or '',
        created_by=created_by,
    )

    GroupMember.objects.create(
        group=group,
        member=created_by,
        invited_by=created_by,
        is_admin=True,
        status=GroupMemberStatus.JOINED,
    )

    invited_members = list(invited_members or [])
    if invited_members:
        invite_users(
            group=group,
            user_ids=[invite['id'] for invite in invited_members],
            invited_by=created_by,
            admin_ids={invite['id'] for invite in invited_members if invite.get('role') == 'admin'},
        )

    logger.info("User %s created group %s with %d invites", created_by.pk, group.pk, len(invited_members))
    return group


def get_group_detail(*, group_id, user: User) -> Group:
    """
    Get a group with its members and transactions for a Joined member.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not a Joined member
    """
    group = get_group_by_id(group_id=group_id)
    if not group.is_joined(user):
        raise InsufficientPermissionsError("Forbidden: You must be a member of the group to view it")

    return (
        Group.objects
        .select_related('created_by')
        .prefetch_related(_members_prefetch(), _transactions_prefetch())
        .get(pk=group.pk)
    )


@transaction.atomic
def update_group(
    *,
    group_id,
    updated_by: User,
    name: Optional[str] = None,
    description: Optional[str] = None
) -> Group:
    """
    Update group name and/or description (admin only).

    Raises:
        GroupNotFoundError: If group doesn't exist
        InvalidGroupDataError: If neither field is given
        InsufficientPermissionsError: If updated_by is not a Joined admin
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    if name is None and description is None:
        raise InvalidGroupDataError()

    if not group.is_joined(updated_by):
        raise InsufficientPermissionsError("Forbidden: You must be a member of the group to update it")
    if not group.is_admin(updated_by):
        raise InsufficientPermissionsError("Forbidden: You must be an admin of the group to update it")

    update_fields = ['updated_at']
    if name is not None:
        group.name = name
        update_fields.append('name')
    if description is not None:
        group.description = description
        update_fields.append('description')
    group.save(update_fields=update_fields)

    return group


@transaction.atomic
def delete_group(*, group_id, deleted_by: User) -> None:
    """
    Delete a group together with its members, transactions and details.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If deleted_by is not the creator
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    if not group.is_creator(deleted_by):
        raise InsufficientPermissionsError("Forbidden: You must be the creator of the group to delete it")

    group.delete()
    logger.info("User %s deleted group %s", deleted_by.pk, group_id)


def get_user_groups(*, user: User) -> QuerySet[Group]:
    """Groups in which the user is currently Joined."""
    return (
        Group.objects
        .filter(group_members__member=user, group_members__status=GroupMemberStatus.JOINED)
        .select_related('created_by')
        .prefetch_related(_members_prefetch())
        .order_by('created_at', 'id')
    )
