"""
Transaction management service.

A transaction records one member paying on behalf of one or more
recipients. The details must add up to the transaction amount exactly.

Repayments are transactions with a negative amount: the single recipient
paid the payer back. Only the payer records their own repayments.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from django.db import transaction
from django.db.models import Prefetch, QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus
from apps.groups.services import get_group_by_id
from apps.transactions.models import Transaction, TransactionDetail

from .exceptions import (
    TransactionNotFoundError,
    ParticipantNotFoundError,
    InsufficientPermissionsError,
    InvalidTransactionError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def _details_total(details: Sequence[dict]) -> Decimal:
    return sum((detail['amount'] for detail in details), ZERO)


def _ensure_users_exist(user_ids) -> None:
    user_ids = set(user_ids)
    if User.objects.filter(id__in=user_ids).count() != len(user_ids):
        raise ParticipantNotFoundError()


def _joined_ids(group: Group, user_ids) -> set:
    return set(
        GroupMember.objects
        .filter(group=group, member_id__in=set(user_ids), status=GroupMemberStatus.JOINED)
        .values_list('member_id', flat=True)
    )


def _check_recipient_rules(
    *,
    amount: Decimal,
    payer_id: Optional[str],
    recipient_ids: List[Optional[str]],
    requested_by: User
) -> None:
    """
    Enforce the repayment and self-payment rules.

    Raises:
        InvalidTransactionError: Repayment without exactly one recipient, or
            an expense whose only recipient is the payer
        InsufficientPermissionsError: Repayment recorded for someone else,
            or repaying oneself
    """
    payer_only = recipient_ids == [payer_id]

    if amount < ZERO:
        if len(recipient_ids) != 1:
            raise InvalidTransactionError("Repayment transactions must have exactly one recipient")
        if payer_id != requested_by.pk:
            raise InsufficientPermissionsError("Cannot create a repayment for another user")
        if payer_only:
            raise InsufficientPermissionsError("Transaction payer cannot be the only recipient")
    elif payer_only:
        raise InvalidTransactionError("Transaction payer cannot be the only recipient")


def _check_detail_signs(*, amount: Decimal, details: Sequence[dict]) -> None:
    """Every share must be non-zero and carry the same sign as the total."""
    for detail in details:
        if detail['amount'] == ZERO:
            raise InvalidTransactionError("Transaction detail amounts cannot be zero")
        if (detail['amount'] < ZERO) != (amount < ZERO):
            raise InvalidTransactionError("Transaction detail amounts must have the same sign as the transaction amount")


def _replace_details(txn: Transaction, details: Sequence[dict]) -> None:
    txn.transaction_details.all().delete()
    TransactionDetail.objects.bulk_create([
        TransactionDetail(
            transaction=txn,
            recipient_id=detail['recipient_id'],
            amount=detail['amount'],
        )
        for detail in details
    ])


def _with_relations(queryset: QuerySet) -> QuerySet:
    return (
        queryset
        .select_related('group', 'group__created_by', 'created_by', 'payer')
        .prefetch_related(
            Prefetch(
                'transaction_details',
                queryset=TransactionDetail.objects.select_related('recipient').order_by('id'),
            )
        )
    )


def get_transaction_by_id(*, transaction_id, for_update: bool = False) -> Transaction:
    """
    Raises:
        TransactionNotFoundError: If the transaction doesn't exist
    """
    transactions = Transaction.objects.select_related('group')
    if for_update:
        transactions = transactions.select_for_update()
    try:
        return transactions.get(id=transaction_id)
    except (Transaction.DoesNotExist, ValueError, TypeError):
        raise TransactionNotFoundError()


@transaction.atomic
def create_transaction(
    *,
    group_id,
    payer_id: str,
    amount: Decimal,
    details: Sequence[dict],
    created_by: User,
    description: str = ''
) -> Transaction:
    """
    Record an expense or a repayment in a group.

    Args:
        group_id: ID of the group
        payer_id: ID of the member who paid
        amount: Non-zero total; negative for repayments
        details: ``{'recipient_id', 'amount'}`` dicts summing to ``amount``
        created_by: User recording the transaction
        description: Optional free text

    Returns:
        Created Transaction instance with details

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If created_by is not Joined, or a
            repayment rule is broken
        ParticipantNotFoundError: If payer or a recipient is unknown or not Joined
        InvalidTransactionError: If totals or recipients are inconsistent
    """
    group = get_group_by_id(group_id=group_id)

    if not group.is_joined(created_by):
        raise InsufficientPermissionsError("Must be in the group to create a transaction")

    recipient_ids = [detail['recipient_id'] for detail in details]
    _ensure_users_exist([payer_id, *recipient_ids])

    joined = _joined_ids(group, [payer_id, *recipient_ids])
    if payer_id not in joined:
        raise ParticipantNotFoundError("Payer is not in this group")
    if not joined.issuperset(recipient_ids):
        raise ParticipantNotFoundError("One or more recipients are not in this group")

    if _details_total(details) != amount:
        raise InvalidTransactionError("Transaction total does not match transaction details total")
    _check_detail_signs(amount=amount, details=details)

    _check_recipient_rules(
        amount=amount,
        payer_id=payer_id,
        recipient_ids=recipient_ids,
        requested_by=created_by,
    )

    txn = Transaction.objects.create(
        group=group,
        amount=amount,
        description=description or '',
        payer_id=payer_id,
        created_by=created_by,
    )
    _replace_details(txn, details)

    logger.info(
        "User %s recorded %s %s in group %s",
        created_by.pk,
        'repayment' if txn.is_repayment else 'expense',
        txn.pk,
        group.pk,
    )
    return get_transaction(transaction_id=txn.pk, user=created_by)


def get_transaction(*, transaction_id, user: User) -> Transaction:
    """
    Fetch a transaction for a Joined member of its group.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist
        InsufficientPermissionsError: If user is not Joined
    """
    txn = get_transaction_by_id(transaction_id=transaction_id)
    if not txn.group.is_joined(user):
        raise InsufficientPermissionsError("Must be in the group to view transaction")
    return _with_relations(Transaction.objects).get(pk=txn.pk)


def list_group_transactions(*, group_id, user: User) -> QuerySet[Transaction]:
    """
    All transactions of a group, oldest first.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not Joined
    """
    group = get_group_by_id(group_id=group_id)
    if not group.is_joined(user):
        raise InsufficientPermissionsError("Must be in the group to view transaction")
    return _with_relations(Transaction.objects.filter(group=group)).order_by('created_at', 'id')


@transaction.atomic
def update_transaction(
    *,
    transaction_id,
    updated_by: User,
    amount: Optional[Decimal] = None,
    description: Optional[str] = None,
    payer_id: Optional[str] = None,
    details: Optional[Sequence[dict]] = None
) -> Transaction:
    """
    Update a transaction. Any Joined member of the group may edit an
    expense; a repayment may only be edited by its payer.

    New details replace the old ones entirely. A changed amount requires
    new details, and a transaction cannot switch between expense and
    repayment.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist
        InsufficientPermissionsError: If updated_by is not Joined, or a
            repayment rule is broken
        ParticipantNotFoundError: If a new payer or recipient is unknown or not Joined
        InvalidTransactionError: If amounts or recipients are inconsistent
    """
    txn = get_transaction_by_id(transaction_id=transaction_id, for_update=True)
    group = txn.group

    if not group.is_joined(updated_by):
        raise InsufficientPermissionsError("Must be in the group to update transaction")

    if txn.is_repayment and txn.payer_id != updated_by.pk:
        raise InsufficientPermissionsError("Cannot create a repayment for another user")

    new_amount = txn.amount
    if amount is not None:
        if amount == ZERO:
            raise InvalidTransactionError("Transaction amount cannot be zero")
        if amount != txn.amount and details is None:
            raise InvalidTransactionError(
                "Transaction details must be updated when the amount of the transaction changes"
            )
        if txn.amount < ZERO < amount:
            raise InvalidTransactionError("Repayment transactions cannot be switched to non-repayment transactions")
        if amount < ZERO < txn.amount:
            raise InvalidTransactionError("Non-repayment transactions cannot be switched to repayment transactions")
        new_amount = amount

    new_payer_id = txn.payer_id
    if payer_id is not None:
        _ensure_users_exist([payer_id])
        if payer_id not in _joined_ids(group, [payer_id]):
            raise ParticipantNotFoundError("New payer is not in this group")
        new_payer_id = payer_id

    if details is not None:
        recipient_ids = [detail['recipient_id'] for detail in details]
        _ensure_users_exist(recipient_ids)
        if not _joined_ids(group, recipient_ids).issuperset(recipient_ids):
            raise ParticipantNotFoundError("One or more recipients are not in this group")
        if _details_total(details) != new_amount:
            raise InvalidTransactionError("Transaction details do not match transaction amount")
        _check_detail_signs(amount=new_amount, details=details)
    else:
        recipient_ids = list(txn.transaction_details.values_list('recipient_id', flat=True))

    _check_recipient_rules(
        amount=new_amount,
        payer_id=new_payer_id,
        recipient_ids=recipient_ids,
        requested_by=updated_by,
    )

    txn.amount = new_amount
    txn.payer_id = new_payer_id
    if description is not None:
        txn.description = description
    txn.save()

    if details is not None:
        _replace_details(txn, details)

    logger.info("User %s updated transaction %s", updated_by.pk, txn.pk)
    return txn


@transaction.atomic
def delete_transaction(*, transaction_id, deleted_by: User) -> None:
    """
    Delete a transaction and its details.

    Allowed for the payer, the member who recorded it, and group admins.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist
        InsufficientPermissionsError: If deleted_by may not delete it
    """
    txn = get_transaction_by_id(transaction_id=transaction_id, for_update=True)
    group = txn.group

    if not group.is_joined(deleted_by):
        raise InsufficientPermissionsError("Must be in the group to delete transaction")

    allowed = (
        txn.payer_id == deleted_by.pk
        or txn.created_by_id == deleted_by.pk
        or group.is_admin(deleted_by)
    )
    if not allowed:
        raise InsufficientPermissionsError("Must be the payer, an admin, or the creator to delete transaction")

    txn.delete()
    logger.info("User %s deleted transaction %s", deleted_by.pk, transaction_id)
