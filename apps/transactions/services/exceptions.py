"""
Domain exceptions for transactions app.

This module defines the exception hierarchy for transaction errors. Every
exception is an ``APIException`` carrying its HTTP status.
"""
from rest_framework.exceptions import APIException


class TransactionServiceError(APIException):
    """Base exception for transaction service errors."""
    status_code = 400
    default_detail = 'Invalid transaction.'
    default_code = 'transaction_error'


class TransactionNotFoundError(TransactionServiceError):
    """Transaction record not found."""
    status_code = 404
    default_detail = 'Transaction not found'
    default_code = 'transaction_not_found'


class ParticipantNotFoundError(TransactionServiceError):
    """Payer or recipient is unknown, or not a Joined member of the group."""
    status_code = 404
    default_detail = 'user not found'
    default_code = 'participant_not_found'


class InsufficientPermissionsError(TransactionServiceError):
    """User doesn't have permission for operation."""
    status_code = 403
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'insufficient_permissions'


class InvalidTransactionError(TransactionServiceError):
    """Amounts or recipients break the transaction rules."""
    status_code = 400
    default_detail = 'Transaction total does not match transaction details total'
    default_code = 'invalid_transaction'
