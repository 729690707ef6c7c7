"""
Shared lookups for group services.

Group ids come straight from the URL, so malformed ids are treated the same
as missing groups.
"""

from typing import Optional

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember

from .exceptions import GroupNotFoundError


def get_group_by_id(*, group_id, for_update: bool = False) -> Group:
    """
    Get a group by ID.

    Args:
        group_id: ID of the group, as received from the client
        for_update: Lock the row for the rest of the transaction

    Returns:
        Group instance

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    groups = Group.objects.select_related('created_by')
    if for_update:
        groups = groups.select_for_update()
    try:
        return groups.get(id=group_id)
    except (Group.DoesNotExist, ValueError, TypeError):
        raise GroupNotFoundError()


def get_member_record(*, group: Group, user_id, for_update: bool = False) -> Optional[GroupMember]:
    """Return the user's membership row in ``group`` whatever its status, or None."""
    members = GroupMember.objects.select_related('member')
    if for_update:
        members = members.select_for_update()
    return members.filter(group=group, member_id=user_id).first()


def user_exists(user_id) -> bool:
    return User.objects.filter(id=user_id).exists()
