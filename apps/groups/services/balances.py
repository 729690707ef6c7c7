"""
Group balance service.

Net balances are derived from the group's transactions: the payer is
credited the transaction amount and every recipient is debited their
share. Repayments carry negative amounts, so the same rule reverses the
flow of money. References cleared when a member left are skipped.
"""

import heapq
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List

from apps.accounts.models import User
from apps.groups.models import GroupMember, GroupMemberStatus
from apps.transactions.models import Transaction

from .exceptions import InsufficientPermissionsError
from .lookups import get_group_by_id

ZERO = Decimal('0.00')


def calculate_net_balances(transactions) -> Dict[str, Decimal]:
    """Map user id to net balance. Positive means the group owes the user."""
    balances = defaultdict(lambda: ZERO)
    for txn in transactions:
        if txn.payer_id is not None:
            balances[txn.payer_id] += txn.amount
        for detail in txn.transaction_details.all():
            if detail.recipient_id is not None:
                balances[detail.recipient_id] -= detail.amount
    return dict(balances)


def calculate_settlements(balances: Dict[str, Decimal]) -> List[tuple]:
    """
    Suggest payments that clear every balance.

    Greedy: the largest debtor repeatedly pays the largest creditor.

    Returns:
        List of ``(from_user_id, to_user_id, amount)`` tuples
    """
    debtors = [(balance, user_id) for user_id, balance in balances.items() if balance < ZERO]
    creditors = [(-balance, user_id) for user_id, balance in balances.items() if balance > ZERO]
    heapq.heapify(debtors)
    heapq.heapify(creditors)

    settlements = []
    while debtors and creditors:
        debt, debtor = heapq.heappop(debtors)
        credit, creditor = heapq.heappop(creditors)
        debt, credit = -debt, -credit

        amount = min(debt, credit)
        settlements.append((debtor, creditor, amount))

        if debt > amount:
            heapq.heappush(debtors, (amount - debt, debtor))
        if credit > amount:
            heapq.heappush(creditors, (amount - credit, creditor))

    return settlements


def get_group_balances(*, group_id, user: User) -> dict:
    """
    Compute balances and suggested settlements for a group.

    Every Joined member is listed, with a zero balance if untouched.

    Returns:
        ``{'balances': [{'user', 'balance'}], 'settlements': [{'from_user', 'to_user', 'amount'}]}``

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not a Joined member
    """
    group = get_group_by_id(group_id=group_id)
    if not group.is_joined(user):
        raise InsufficientPermissionsError("Forbidden: You must be a member of the group to view it")

    transactions = (
        Transaction.objects
        .filter(group=group)
        .prefetch_related('transaction_details')
    )
    balances = calculate_net_balances(transactions)

    joined_ids = GroupMember.objects.filter(
        group=group,
        status=GroupMemberStatus.JOINED,
    ).values_list('member_id', flat=True)
    for member_id in joined_ids:
        balances.setdefault(member_id, ZERO)

    users = User.objects.in_bulk(list(balances))
    ordered_users = sorted(users.values(), key=lambda u: u.username.lower())

    return {
        'balances': [
            {'user': u, 'balance': balances[u.pk]}
            for u in ordered_users
        ],
        'settlements': [
            {'from_user': users[from_id], 'to_user': users[to_id], 'amount': amount}
            for from_id, to_id, amount in calculate_settlements(balances)
        ],
    }
