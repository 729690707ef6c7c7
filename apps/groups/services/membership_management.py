"""
Membership management service.

Handles invitations and the membership status lifecycle:

    Invited -> Joined | Declined | Kicked (invite rescinded)
    Joined  -> Left | Kicked | Banned
    Banned  -> Kicked (unban)
    Left | Declined | Kicked -> Invited (re-invite)

Rows are never deleted here. Whenever a member stops being Joined their
identity is detached from the group's transactions.
"""

import logging
from typing import Iterable, List

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus
from apps.transactions.models import Transaction, TransactionDetail

from .exceptions import (
    GroupUserNotFoundError,
    MemberNotFoundError,
    InsufficientPermissionsError,
    InvalidMembershipStateError,
)
from .lookups import get_group_by_id, get_member_record, user_exists

logger = logging.getLogger(__name__)

# Statuses an admin may move a Joined/Banned member into, keyed by current status
ADMIN_TRANSITIONS = {
    GroupMemberStatus.JOINED: {GroupMemberStatus.KICKED, GroupMemberStatus.BANNED},
    GroupMemberStatus.BANNED: {GroupMemberStatus.KICKED},
}

REINVITABLE_STATUSES = {
    GroupMemberStatus.LEFT,
    GroupMemberStatus.DECLINED,
    GroupMemberStatus.KICKED,
}


def detach_member_from_transactions(*, group: Group, user_id) -> None:
    """Clear payer, creator and recipient references to the user within the group."""
    Transaction.objects.filter(group=group, payer_id=user_id).update(payer=None)
    Transaction.objects.filter(group=group, created_by_id=user_id).update(created_by=None)
    TransactionDetail.objects.filter(transaction__group=group, recipient_id=user_id).update(recipient=None)


def _end_membership(membership: GroupMember, status: str) -> None:
    was_joined = membership.is_joined
    membership.set_status(status)
    if was_joined:
        detach_member_from_transactions(group=membership.group, user_id=membership.member_id)
    logger.info(
        "Member %s of group %s is now %s",
        membership.member_id,
        membership.group_id,
        status,
    )


def invite_users(
    *,
    group: Group,
    user_ids: Iterable[str],
    invited_by: User,
    admin_ids: Iterable[str] = ()
) -> List[GroupMember]:
    """
    Invite users to a group, all or nothing.

    Users who previously left, declined or were kicked are re-invited on
    their existing row.

    Args:
        group: Group to invite into
        user_ids: IDs of users to invite; duplicates count once
        invited_by: User sending the invites
        admin_ids: IDs whose invite carries admin rights

    Returns:
        The Invited GroupMember rows

    Raises:
        InvalidMembershipStateError: If the list is empty, or a user is
            already invited, Joined or Banned
        GroupUserNotFoundError: If any user doesn't exist
    """
    unique_ids = list(dict.fromkeys(user_ids))
    if not unique_ids:
        raise InvalidMembershipStateError("You must provide at least one member to add to the group")

    users = User.objects.in_bulk(unique_ids)
    if len(users) != len(unique_ids):
        raise GroupUserNotFoundError("One of the users you tried to add to the group does not exist")

    existing = {
        membership.member_id: membership
        for membership in (
            GroupMember.objects
            .select_for_update()
            .filter(group=group, member_id__in=unique_ids)
        )
    }

    for membership in existing.values():
        if membership.status == GroupMemberStatus.INVITED:
            raise InvalidMembershipStateError("A user you tried to add has already been invited to the group")
        if membership.status == GroupMemberStatus.JOINED:
            raise InvalidMembershipStateError("A user you tried to add is already in the group")
        if membership.status == GroupMemberStatus.BANNED:
            raise InvalidMembershipStateError("A user you tried to add is banned from the group")

    admin_ids = set(admin_ids)
    invited = []
    for user_id in unique_ids:
        membership = existing.get(user_id)
        if membership is None:
            membership = GroupMember.objects.create(
                group=group,
                member=users[user_id],
                invited_by=invited_by,
                is_admin=user_id in admin_ids,
                status=GroupMemberStatus.INVITED,
            )
        else:
            membership.status = GroupMemberStatus.INVITED
            membership.invited_by = invited_by
            membership.is_admin = user_id in admin_ids
            membership.save(update_fields=['status', 'invited_by', 'is_admin', 'updated_at'])
        invited.append(membership)

    logger.info("User %s invited %d users to group %s", invited_by.pk, len(invited), group.pk)
    return invited


@transaction.atomic
def add_members(
    *,
    group_id,
    member_ids: Iterable[str],
    added_by: User,
    admin_ids: Iterable[str] = ()
) -> int:
    """
    Invite users to a group on behalf of a Joined member.

    Only group admins may invite someone with the admin role.

    Returns:
        Number of users invited

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If added_by is not Joined, or grants
            the admin role without being an admin
        GroupsServiceError: If any invite is rejected (see ``invite_users``)
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    if not group.is_joined(added_by):
        raise InsufficientPermissionsError("Forbidden: You must be a member of the group to add members")

    admin_ids = set(admin_ids)
    if admin_ids and not group.is_admin(added_by):
        raise InsufficientPermissionsError("You must be an admin to invite a member as admin")

    invited = invite_users(group=group, user_ids=member_ids, invited_by=added_by, admin_ids=admin_ids)
    return len(invited)


@transaction.atomic
def leave_group(*, group_id, user: User) -> GroupMember:
    """
    Leave a group.

    The creator cannot leave their own group, they must delete it or
    transfer ownership first.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is the creator, has no
            membership, or is banned
        InvalidMembershipStateError: If user is not Joined
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    if group.is_creator(user):
        raise InsufficientPermissionsError("You cannot leave a group you created. Delete the group instead")

    membership = get_member_record(group=group, user_id=user.pk, for_update=True)
    if membership is None:
        raise InsufficientPermissionsError("Forbidden: You must be a member of the group to leave it")
    if membership.status == GroupMemberStatus.BANNED:
        raise InsufficientPermissionsError("Forbidden: You are banned from the group")
    if not membership.is_joined:
        raise InvalidMembershipStateError("You are not in the group")

    _end_membership(membership, GroupMemberStatus.LEFT)
    return membership


@transaction.atomic
def remove_member(*, group_id, member_id: str, removed_by: User) -> GroupMember:
    """
    Kick a Joined member from the group (admin only).

    Only the creator may remove another admin.

    Raises:
        GroupNotFoundError: If group doesn't exist
        GroupUserNotFoundError: If the target user doesn't exist
        InsufficientPermissionsError: On self-removal, non-admin remover,
            or a protected target
        InvalidMembershipStateError: If the target is not Joined
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    if not user_exists(member_id):
        raise GroupUserNotFoundError()

    if member_id == removed_by.pk:
        raise InsufficientPermissionsError("You cannot remove yourself from the group. Leave the group instead")

    if not group.is_admin(removed_by):
        raise InsufficientPermissionsError("You must be an admin to remove users from the group")

    if group.created_by_id == member_id:
        raise InsufficientPermissionsError("You cannot remove the creator of the group")

    membership = get_member_record(group=group, user_id=member_id, for_update=True)
    if membership is None:
        raise InvalidMembershipStateError("User not found in group")
    if not membership.is_joined:
        raise InvalidMembershipStateError("User is not in the group")

    if membership.is_admin and not group.is_creator(removed_by):
        raise InsufficientPermissionsError("You cannot remove an admin from the group")

    _end_membership(membership, GroupMemberStatus.KICKED)
    return membership


@transaction.atomic
def change_member_status(
    *,
    group_id,
    member_id: str,
    new_status: str,
    changed_by: User
) -> GroupMember:
    """
    Change a membership status.

    Members answer their own invites (Joined or Declined). Admins kick or
    ban Joined members and lift bans. Pending invites may also be rescinded
    by whoever sent them.

    Args:
        group_id: ID of the group
        member_id: ID of the user whose status changes
        new_status: Target GroupMemberStatus value
        changed_by: User performing the change

    Returns:
        Updated GroupMember instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        MemberNotFoundError: If either user has no membership record
        InsufficientPermissionsError: If the transition is not allowed
            for changed_by
    """
    group = get_group_by_id(group_id=group_id, for_update=True)

    requester = get_member_record(group=group, user_id=changed_by.pk, for_update=True)
    target = get_member_record(group=group, user_id=member_id, for_update=True)
    if requester is None or target is None:
        raise MemberNotFoundError()

    if requester.status == GroupMemberStatus.BANNED:
        raise InsufficientPermissionsError("You are banned from the group")

    if requester.pk == target.pk:
        if requester.status != GroupMemberStatus.INVITED:
            raise InsufficientPermissionsError("You cannot change your own status")
        if new_status not in (GroupMemberStatus.JOINED, GroupMemberStatus.DECLINED):
            raise InsufficientPermissionsError("You can only accept or decline an invite")
        target.set_status(new_status)
        logger.info("User %s answered invite to group %s: %s", changed_by.pk, group.pk, new_status)
        return target

    if not requester.is_joined:
        raise InsufficientPermissionsError("You can not change the status of another user")

    if group.created_by_id == target.member_id:
        raise InsufficientPermissionsError("You cannot change the status of the creator of the group")

    rescinding_invite = (
        target.status == GroupMemberStatus.INVITED
        and new_status == GroupMemberStatus.KICKED
    )
    if rescinding_invite and (requester.is_admin or target.invited_by_id == changed_by.pk):
        _end_membership(target, GroupMemberStatus.KICKED)
        return target

    if not requester.is_admin:
        raise InsufficientPermissionsError("You must be an admin of the group to update it")

    if target.is_admin and not group.is_creator(changed_by):
        raise InsufficientPermissionsError("You cannot change the status of an admin")

    if new_status not in ADMIN_TRANSITIONS.get(target.status, set()):
        raise InsufficientPermissionsError("You cannot change the status of a user who is not in the group")

    _end_membership(target, new_status)
    return target


def get_user_invites(*, user: User) -> QuerySet[GroupMember]:
    """Pending invites addressed to the user."""
    return (
        GroupMember.objects
        .filter(member=user, status=GroupMemberStatus.INVITED)
        .select_related('group', 'group__created_by', 'invited_by', 'member')
        .order_by('-created_at', '-id')
    )
