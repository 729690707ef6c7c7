"""
Role management service.

Handles admin promotion, demotion and ownership transfer with
concurrency protection.
"""

import logging

from django.db import transaction

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember

from .exceptions import (
    MemberNotFoundError,
    InsufficientPermissionsError,
    InvalidMembershipStateError,
)
from .lookups import get_group_by_id, get_member_record

logger = logging.getLogger(__name__)


@transaction.atomic
def promote_member(*, group_id, member_id: str, promoted_by: User) -> GroupMember:
    """
    Grant admin rights to a Joined member (admin only).

    Args:
        group_id: ID of the group
        member_id: ID of the user to promote
        promoted_by: User performing the promotion (must be admin)

    Returns:
        Updated GroupMember instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If promoted_by is not a Joined admin,
            or the target is the creator
        MemberNotFoundError: If the target has no membership record
        InvalidMembershipStateError: If the target is not Joined or is
            already an admin
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    requester = get_member_record(group=group, user_id=promoted_by.pk)
    if requester is None or not requester.is_joined:
        raise InsufficientPermissionsError("You must be a member of the group to promote a member to admin")

    membership = get_member_record(group=group, user_id=member_id, for_update=True)
    if membership is None:
        raise MemberNotFoundError()

    if not requester.is_admin:
        raise InsufficientPermissionsError("You must be an admin to promote a member to admin")

    if group.created_by_id == membership.member_id:
        raise InsufficientPermissionsError("You cannot edit the creator of the group")

    if not membership.is_joined:
        raise InvalidMembershipStateError("User is not in the group")
    if membership.is_admin:
        raise InvalidMembershipStateError("User is already an admin")

    membership.is_admin = True
    membership.save(update_fields=['is_admin', 'updated_at'])

    logger.info("User %s promoted %s in group %s", promoted_by.pk, member_id, group.pk)
    return membership


@transaction.atomic
def demote_member(*, group_id, member_id: str, demoted_by: User) -> GroupMember:
    """
    Revoke admin rights from a member (creator only).

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If demoted_by is not the creator, or
            the target is the creator
        MemberNotFoundError: If the target has no membership record
        InvalidMembershipStateError: If the target is not a Joined admin
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    if not group.is_creator(demoted_by):
        raise InsufficientPermissionsError("You must be the creator of the group to demote an admin to member")

    if group.created_by_id == member_id:
        raise InsufficientPermissionsError("You cannot edit the creator of the group")

    membership = get_member_record(group=group, user_id=member_id, for_update=True)
    if membership is None:
        raise MemberNotFoundError()
    if not membership.is_joined:
        raise InvalidMembershipStateError("User not found in group")
    if not membership.is_admin:
        raise InvalidMembershipStateError("User is not an admin")

    membership.is_admin = False
    membership.save(update_fields=['is_admin', 'updated_at'])

    logger.info("User %s demoted %s in group %s", demoted_by.pk, member_id, group.pk)
    return membership


@transaction.atomic
def transfer_ownership(*, group_id, new_owner_id: str, transferred_by: User) -> Group:
    """
    Hand the group over to another Joined member (creator only).

    The new owner becomes an admin; the previous owner stays a Joined admin.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If transferred_by is not the creator,
            or is transferring to themselves
        MemberNotFoundError: If the new owner is not a Joined member
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    if not group.is_creator(transferred_by):
        raise InsufficientPermissionsError("You must be the creator of the group to transfer ownership")

    if new_owner_id == transferred_by.pk:
        raise InsufficientPermissionsError("User is already the owner of the group")

    membership = get_member_record(group=group, user_id=new_owner_id, for_update=True)
    if membership is None or not membership.is_joined:
        raise MemberNotFoundError("User is not in the group")

    group.created_by = membership.member
    group.save(update_fields=['created_by', 'updated_at'])

    membership.is_admin = True
    membership.save(update_fields=['is_admin', 'updated_at'])

    logger.info("Group %s transferred from %s to %s", group.pk, transferred_by.pk, new_owner_id)
    return group
