"""Services for transactions business logic."""

from .exceptions import (
    TransactionServiceError,
    TransactionNotFoundError,
    ParticipantNotFoundError,
    InsufficientPermissionsError,
    InvalidTransactionError,
)
from .transaction_management import (
    get_transaction_by_id,
    create_transaction,
    get_transaction,
    list_group_transactions,
    update_transaction,
    delete_transaction,
)

__all__ = [
    # Exceptions
    'TransactionServiceError',
    'TransactionNotFoundError',
    'ParticipantNotFoundError',
    'InsufficientPermissionsError',
    'InvalidTransactionError',
    # Services
    'get_transaction_by_id',
    'create_transaction',
    'get_transaction',
    'list_group_transactions',
    'update_transaction',
    'delete_transaction',
]
