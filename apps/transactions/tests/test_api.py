import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.groups.models import GroupMember, GroupMemberStatus
from apps.transactions.models import Transaction, TransactionDetail

from .conftest import record


TRANSACTION_KEYS = [
    'id', 'amount', 'createdById', 'createdBy', 'payerId', 'payer',
    'description', 'createdAt', 'updatedAt', 'groupId', 'transactionDetails',
]


def create_payload(group, payer, amount, shares, **extra):
    return {
        'groupId': group.id,
        'payerId': payer.id,
        'amount': amount,
        'transactionDetails': [
            {'recipientId': recipient.id, 'amount': share}
            for recipient, share in shares
        ],
        **extra,
    }


def detail_url(txn):
    return reverse('transactions:transaction-detail', args=[txn.id])


# =============================================================================
# Create Tests
# =============================================================================

@pytest.mark.django_db
class TestCreateTransaction:
    """Tests for POST /api/v1/transactions/"""

    def test_create_expense(self, owner_client, group, owner, alice, bob):
        """Any member may record an expense paid by someone else."""
        payload = create_payload(
            group, alice, '30.00',
            [(alice, '10.00'), (bob, '10.00'), (owner, '10.00')],
            description='Dinner',
        )
        response = owner_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_201_CREATED
        assert list(response.data.keys()) == TRANSACTION_KEYS
        assert response.data['amount'] == Decimal('30.00')
        assert response.data['payerId'] == alice.id
        assert response.data['createdById'] == owner.id
        assert response.data['groupId'] == group.id
        assert response.data['description'] == 'Dinner'
        assert len(response.data['transactionDetails']) == 3

        txn = Transaction.objects.get(id=response.data['id'])
        assert txn.transaction_details.count() == 3
        assert not txn.is_repayment

    def test_create_repayment(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '-15.00', [(bob, '-15.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_201_CREATED
        assert Transaction.objects.get(id=response.data['id']).is_repayment

    @pytest.mark.parametrize('amount', ['0', '0.00'])
    def test_zero_amount(self, alice_client, group, alice, bob, amount):
        payload = create_payload(group, alice, amount, [(bob, amount)])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Amount is required'

    def test_missing_amount(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '10.00', [(bob, '10.00')])
        del payload['amount']
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Amount is required'

    def test_missing_group_id(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '10.00', [(bob, '10.00')])
        del payload['groupId']
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_no_recipients(self, alice_client, group, alice):
        payload = create_payload(group, alice, '10.00', [])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction must have at least one recipient'

    def test_duplicate_recipients(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '10.00', [(bob, '5.00'), (bob, '5.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Each recipient can only appear once in a transaction'

    def test_missing_group(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '10.00', [(bob, '10.00')])
        payload['groupId'] = 999999
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'Group not found'

    def test_caller_not_in_group(self, outsider_client, group, alice, bob):
        payload = create_payload(group, alice, '10.00', [(bob, '10.00')])
        response = outsider_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Must be in the group to create a transaction'

    def test_unknown_recipient(self, alice_client, group, alice):
        payload = create_payload(group, alice, '10.00', [])
        payload['transactionDetails'] = [{'recipientId': 'ghost', 'amount': '10.00'}]
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'user not found'

    def test_payer_not_in_group(self, alice_client, group, outsider, bob):
        payload = create_payload(group, outsider, '10.00', [(bob, '10.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'Payer is not in this group'

    def test_recipient_left_group(self, alice_client, group, alice, bob):
        GroupMember.objects.filter(group=group, member=bob).update(status=GroupMemberStatus.LEFT)
        payload = create_payload(group, alice, '10.00', [(bob, '10.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'One or more recipients are not in this group'

    def test_total_mismatch(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '30.00', [(alice, '10.00'), (bob, '10.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction total does not match transaction details total'
        assert not Transaction.objects.exists()

    def test_repayment_with_two_recipients(self, alice_client, group, alice, bob, owner):
        payload = create_payload(group, alice, '-15.00', [(bob, '-10.00'), (owner, '-5.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Repayment transactions must have exactly one recipient'

    def test_repayment_for_another_user(self, owner_client, group, alice, bob):
        payload = create_payload(group, alice, '-15.00', [(bob, '-15.00')])
        response = owner_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Cannot create a repayment for another user'

    def test_repayment_to_self(self, alice_client, group, alice):
        payload = create_payload(group, alice, '-15.00', [(alice, '-15.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Transaction payer cannot be the only recipient'

    def test_expense_for_payer_only(self, alice_client, group, alice):
        payload = create_payload(group, alice, '15.00', [(alice, '15.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction payer cannot be the only recipient'

    def test_share_with_opposite_sign(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '50.00', [(bob, '60.00'), (alice, '-10.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction detail amounts must have the same sign as the transaction amount'
        assert not Transaction.objects.exists()

    def test_zero_share(self, alice_client, group, alice, bob, owner):
        payload = create_payload(group, alice, '10.00', [(bob, '10.00'), (owner, '0.00')])
        response = alice_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction detail amounts cannot be zero'

    def test_web_client_add_route(self, alice_client, group, alice, bob):
        payload = create_payload(group, alice, '20.00', [(alice, '10.00'), (bob, '10.00')])
        response = alice_client.post('/api/v1/Transactions/add', payload)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['groupId'] == group.id

    def test_unauthenticated(self, api_client, group, alice, bob):
        payload = create_payload(group, alice, '10.00', [(bob, '10.00')])
        response = api_client.post(reverse('transactions:transaction-list'), payload)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Read Tests
# =============================================================================

@pytest.mark.django_db
class TestRetrieveTransaction:
    """Tests for GET /api/v1/transactions/{id}/"""

    def test_retrieve_with_group(self, bob_client, expense, group):
        response = bob_client.get(detail_url(expense))

        assert response.status_code == status.HTTP_200_OK
        assert list(response.data.keys()) == ['group', *TRANSACTION_KEYS]
        assert response.data['group']['id'] == group.id
        assert response.data['group']['groupMembers'] is None
        assert response.data['group']['transactions'] is None
        assert [d['amount'] for d in response.data['transactionDetails']] == [Decimal('15.00'), Decimal('15.00')]

    def test_retrieve_not_member(self, outsider_client, expense):
        response = outsider_client.get(detail_url(expense))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Must be in the group to view transaction'

    def test_retrieve_missing(self, alice_client):
        response = alice_client.get(reverse('transactions:transaction-detail', args=[999999]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'Transaction not found'


@pytest.mark.django_db
class TestListTransactions:
    """Tests for GET /api/v1/transactions/?groupId="""

    def test_list_group_transactions(self, alice_client, group, expense, repayment):
        response = alice_client.get(reverse('transactions:transaction-list'), {'groupId': group.id})

        assert response.status_code == status.HTTP_200_OK
        assert [txn['id'] for txn in response.data] == [expense.id, repayment.id]

    def test_list_requires_group_id(self, alice_client):
        response = alice_client.get(reverse('transactions:transaction-list'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'groupId query parameter is required'

    def test_list_not_member(self, outsider_client, group, expense):
        response = outsider_client.get(reverse('transactions:transaction-list'), {'groupId': group.id})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Must be in the group to view transaction'

    def test_list_malformed_group_id(self, alice_client):
        response = alice_client.get(reverse('transactions:transaction-list'), {'groupId': 'abc'})

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Update Tests
# =============================================================================

@pytest.mark.django_db
class TestUpdateTransaction:
    """Tests for PUT/PATCH /api/v1/transactions/{id}/"""

    def test_any_member_updates_description(self, bob_client, expense):
        response = bob_client.patch(detail_url(expense), {'description': 'Weekly shop'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == 'Transaction updated'
        expense.refresh_from_db()
        assert expense.description == 'Weekly shop'
        assert expense.amount == Decimal('30.00')

    def test_update_replaces_details(self, alice_client, expense, owner, bob):
        payload = {
            'amount': '40.00',
            'transactionDetails': [
                {'recipientId': owner.id, 'amount': '25.00'},
                {'recipientId': bob.id, 'amount': '15.00'},
            ],
        }
        response = alice_client.put(detail_url(expense), payload)

        assert response.status_code == status.HTTP_200_OK
        expense.refresh_from_db()
        assert expense.amount == Decimal('40.00')
        shares = dict(expense.transaction_details.values_list('recipient_id', 'amount'))
        assert shares == {owner.id: Decimal('25.00'), bob.id: Decimal('15.00')}

    def test_update_payer(self, alice_client, expense, owner):
        response = alice_client.patch(detail_url(expense), {'payerId': owner.id})

        assert response.status_code == status.HTTP_200_OK
        expense.refresh_from_db()
        assert expense.payer_id == owner.id

    def test_not_member(self, outsider_client, expense):
        response = outsider_client.patch(detail_url(expense), {'description': 'x'})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Must be in the group to update transaction'

    def test_zero_amount(self, alice_client, expense):
        response = alice_client.patch(detail_url(expense), {'amount': '0'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction amount cannot be zero'

    def test_amount_without_details(self, alice_client, expense):
        response = alice_client.patch(detail_url(expense), {'amount': '45.00'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction details must be updated when the amount of the transaction changes'

    def test_expense_to_repayment(self, alice_client, expense, bob):
        payload = {
            'amount': '-30.00',
            'transactionDetails': [{'recipientId': bob.id, 'amount': '-30.00'}],
        }
        response = alice_client.patch(detail_url(expense), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Non-repayment transactions cannot be switched to repayment transactions'

    def test_repayment_to_expense(self, alice_client, repayment, bob):
        payload = {
            'amount': '15.00',
            'transactionDetails': [{'recipientId': bob.id, 'amount': '15.00'}],
        }
        response = alice_client.patch(detail_url(repayment), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Repayment transactions cannot be switched to non-repayment transactions'

    def test_unknown_payer(self, alice_client, expense):
        response = alice_client.patch(detail_url(expense), {'payerId': 'ghost'})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'user not found'

    def test_new_payer_not_in_group(self, alice_client, expense, outsider):
        response = alice_client.patch(detail_url(expense), {'payerId': outsider.id})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'New payer is not in this group'

    def test_recipient_not_in_group(self, alice_client, expense, outsider):
        payload = {'transactionDetails': [{'recipientId': outsider.id, 'amount': '30.00'}]}
        response = alice_client.patch(detail_url(expense), payload)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == 'One or more recipients are not in this group'

    def test_details_mismatch(self, alice_client, expense, bob):
        payload = {'transactionDetails': [{'recipientId': bob.id, 'amount': '20.00'}]}
        response = alice_client.patch(detail_url(expense), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction details do not match transaction amount'

    def test_payer_becomes_only_recipient(self, alice_client, expense, bob):
        response = alice_client.patch(detail_url(expense), {'payerId': bob.id})
        assert response.status_code == status.HTTP_200_OK

        payload = {'transactionDetails': [{'recipientId': bob.id, 'amount': '30.00'}]}
        response = alice_client.patch(detail_url(expense), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction payer cannot be the only recipient'

    def test_repayment_only_updated_by_payer(self, bob_client, repayment):
        response = bob_client.patch(detail_url(repayment), {'description': 'Thanks'})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Cannot create a repayment for another user'

    def test_repayment_payer_cannot_be_reassigned(self, owner_client, repayment, alice, owner):
        response = owner_client.patch(detail_url(repayment), {'payerId': owner.id})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Cannot create a repayment for another user'
        repayment.refresh_from_db()
        assert repayment.payer_id == alice.id

    def test_payer_updates_own_repayment(self, alice_client, repayment):
        response = alice_client.patch(detail_url(repayment), {'description': 'Cash'})

        assert response.status_code == status.HTTP_200_OK
        repayment.refresh_from_db()
        assert repayment.description == 'Cash'

    def test_zero_share_on_update(self, alice_client, expense, bob, owner):
        payload = {
            'transactionDetails': [
                {'recipientId': bob.id, 'amount': '30.00'},
                {'recipientId': owner.id, 'amount': '0.00'},
            ],
        }
        response = alice_client.patch(detail_url(expense), payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == 'Transaction detail amounts cannot be zero'

    def test_missing_transaction(self, alice_client):
        url = reverse('transactions:transaction-detail', args=[999999])
        response = alice_client.patch(url, {'description': 'x'})

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Delete Tests
# =============================================================================

@pytest.mark.django_db
class TestDeleteTransaction:
    """Tests for DELETE /api/v1/transactions/{id}/"""

    def test_payer_deletes(self, alice_client, expense):
        response = alice_client.delete(detail_url(expense))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == 'Transaction deleted'
        assert not Transaction.objects.filter(id=expense.id).exists()
        assert not TransactionDetail.objects.filter(transaction_id=expense.id).exists()

    def test_recorder_deletes(self, bob_client, group, alice, bob, owner):
        txn = record(group, alice, '20.00', {owner: '20.00'}, created_by=bob)
        response = bob_client.delete(detail_url(txn))

        assert response.status_code == status.HTTP_200_OK

    def test_admin_deletes(self, owner_client, expense):
        response = owner_client.delete(detail_url(expense))

        assert response.status_code == status.HTTP_200_OK

    def test_other_member_cannot_delete(self, bob_client, expense):
        response = bob_client.delete(detail_url(expense))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Must be the payer, an admin, or the creator to delete transaction'
        assert Transaction.objects.filter(id=expense.id).exists()

    def test_not_member(self, outsider_client, expense):
        response = outsider_client.delete(detail_url(expense))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == 'Must be in the group to delete transaction'
