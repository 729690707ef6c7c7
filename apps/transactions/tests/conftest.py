import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus
from apps.transactions.models import Transaction, TransactionDetail


def make_user(username):
    return User.objects.create_user(
        email=f'{username}@example.com',
        username=username,
        password='TestPass123!',
    )


def client_for(user):
    """Return an API client authenticated as ``user`` using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def record(group, payer, amount, shares, created_by=None, description=''):
    """Create a transaction directly, ``shares`` maps recipient to amount."""
    txn = Transaction.objects.create(
        group=group,
        amount=Decimal(amount),
        description=description,
        payer=payer,
        created_by=created_by or payer,
    )
    for recipient, share in shares.items():
        TransactionDetail.objects.create(transaction=txn, recipient=recipient, amount=Decimal(share))
    return txn


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def owner(db):
    """Group creator and admin."""
    return make_user('owner')


@pytest.fixture
def alice(db):
    return make_user('alice')


@pytest.fixture
def bob(db):
    return make_user('bob')


@pytest.fixture
def outsider(db):
    """Not a member of the group."""
    return make_user('outsider')


@pytest.fixture
def owner_client(owner):
    return client_for(owner)


@pytest.fixture
def alice_client(alice):
    return client_for(alice)


@pytest.fixture
def bob_client(bob):
    return client_for(bob)


@pytest.fixture
def outsider_client(outsider):
    return client_for(outsider)


@pytest.fixture
def group(owner, alice, bob):
    """Group with the creator as admin and alice and bob as Joined members."""
    group = Group.objects.create(name='Flatmates', created_by=owner)
    GroupMember.objects.create(
        group=group, member=owner, invited_by=owner, is_admin=True, status=GroupMemberStatus.JOINED,
    )
    for user in (alice, bob):
        GroupMember.objects.create(group=group, member=user, invited_by=owner, status=GroupMemberStatus.JOINED)
    return group


@pytest.fixture
def expense(group, alice, bob):
    """Alice paid 30.00, split evenly with bob."""
    return record(group, alice, '30.00', {alice: '15.00', bob: '15.00'}, description='Groceries')


@pytest.fixture
def repayment(group, alice, bob):
    """Bob paid alice back 15.00, recorded by alice."""
    return record(group, alice, '-15.00', {bob: '-15.00'})
