"""
Domain-specific exceptions for groups app.

These exceptions represent business rule violations. They are
``APIException`` subclasses, so views let them propagate and the project
exception handler turns them into HTTP responses carrying the message.
"""
from rest_framework.exceptions import APIException


class GroupsServiceError(APIException):
    """Base exception for all groups service errors."""
    status_code = 400
    default_detail = 'Invalid group request.'
    default_code = 'groups_error'


class GroupNotFoundError(GroupsServiceError):
    """Raised when a group does not exist."""
    status_code = 404
    default_detail = 'Group not found'
    default_code = 'group_not_found'


class MemberNotFoundError(GroupsServiceError):
    """Raised when a user has no membership record in the group."""
    status_code = 404
    default_detail = 'User not found in group'
    default_code = 'member_not_found'


class GroupUserNotFoundError(GroupsServiceError):
    """Raised when a referenced user does not exist at all."""
    status_code = 404
    default_detail = 'User not found'
    default_code = 'user_not_found'


class InsufficientPermissionsError(GroupsServiceError):
    """Raised when a user lacks required permissions for an action."""
    status_code = 403
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'insufficient_permissions'


class InvalidMembershipStateError(GroupsServiceError):
    """Raised when a membership is in the wrong status for an action."""
    default_detail = 'User is not in the group'
    default_code = 'invalid_membership_state'


class InvalidGroupDataError(GroupsServiceError):
    """Raised when group fields are missing or out of bounds."""
    default_detail = 'You must provide a name or description to update the group'
    default_code = 'invalid_group_data'
