"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    EmailInUseError,
    UsernameInUseError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    InsufficientPermissionsError,
    GroupOwnerDeletionError,
)
from .user_registration import register_user, ensure_unique_identity
from .user_authentication import authenticate_user
from .account_management import (
    get_user_by_id,
    get_own_user,
    update_user,
    delete_user,
    search_users,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'EmailInUseError',
    'UsernameInUseError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'InsufficientPermissionsError',
    'GroupOwnerDeletionError',
    # Services
    'register_user',
    'ensure_unique_identity',
    'authenticate_user',
    'get_user_by_id',
    'get_own_user',
    'update_user',
    'delete_user',
    'search_users',
]
