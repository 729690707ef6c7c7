"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    MemberNotFoundError,
    GroupUserNotFoundError,
    InsufficientPermissionsError,
    InvalidMembershipStateError,
    InvalidGroupDataError,
)

from .lookups import (
    get_group_by_id,
    get_member_record,
)

from .group_management import (
    create_group,
    get_group_detail,
    update_group,
    delete_group,
    get_user_groups,
)

from .membership_management import (
    invite_users,
    add_members,
    leave_group,
    remove_member,
    change_member_status,
    get_user_invites,
    detach_member_from_transactions,
)

from .role_management import (
    promote_member,
    demote_member,
    transfer_ownership,
)

from .balances import (
    calculate_net_balances,
    calculate_settlements,
    get_group_balances,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'MemberNotFoundError',
    'GroupUserNotFoundError',
    'InsufficientPermissionsError',
    'InvalidMembershipStateError',
    'InvalidGroupDataError',

    # Lookups
    'get_group_by_id',
    'get_member_record',

    # Group Management
    'create_group',
    'get_group_detail',
    'update_group',
    'delete_group',
    'get_user_groups',

    # Membership Management
    'invite_users',
    'add_members',
    'leave_group',
    'remove_member',
    'change_member_status',
    'get_user_invites',
    'detach_member_from_transactions',

    # Role Management
    'promote_member',
    'demote_member',
    'transfer_ownership',

    # Balances
    'calculate_net_balances',
    'calculate_settlements',
    'get_group_balances',
]
