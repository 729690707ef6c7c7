"""
Domain-specific exceptions for accounts services.

Each exception is an ``APIException`` so views can let it propagate and the
project exception handler renders its message with the right status code.
"""
from rest_framework.exceptions import APIException


class AccountsServiceError(APIException):
    """Base exception for accounts services."""
    status_code = 400
    default_detail = 'Invalid request.'
    default_code = 'accounts_error'


class EmailInUseError(AccountsServiceError):
    """Raised when another account already uses the email."""
    default_detail = 'Email already in use'
    default_code = 'email_in_use'


class UsernameInUseError(AccountsServiceError):
    """Raised when another account already uses the username."""
    default_detail = 'Username already in use'
    default_code = 'username_in_use'


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    status_code = 401
    default_detail = 'Invalid email or password'
    default_code = 'invalid_credentials'


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    status_code = 403
    default_detail = 'Account is deactivated'
    default_code = 'inactive_account'


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    status_code = 404
    default_detail = 'User not found'
    default_code = 'user_not_found'


class InsufficientPermissionsError(AccountsServiceError):
    """Raised when a user acts on another user's record."""
    status_code = 403
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'insufficient_permissions'


class GroupOwnerDeletionError(InsufficientPermissionsError):
    """Raised when a group creator tries to delete their account."""
    default_detail = (
        'you cannot delete your account as a group owner. '
        'Transfer ownership to another user first'
    )
    default_code = 'group_owner_deletion'
