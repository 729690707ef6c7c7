import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus
from apps.transactions.models import Transaction, TransactionDetail


def make_user(username, **extra_fields):
    return User.objects.create_user(
        email=f'{username}@example.com',
        username=username,
        password='TestPass123!',
        **extra_fields,
    )


def client_for(user):
    """Return an API client authenticated as ``user`` using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def add_membership(group, user, status=GroupMemberStatus.JOINED, is_admin=False, invited_by=None):
    return GroupMember.objects.create(
        group=group,
        member=user,
        invited_by=invited_by or group.created_by,
        status=status,
        is_admin=is_admin,
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def group_owner(db):
    """Create and return a test user (group creator)."""
    return make_user('owner', first_name='Olga', last_name='Owner')


@pytest.fixture
def admin_user(db):
    """Create and return an admin user."""
    return make_user('admin', first_name='Adam', last_name='Admin')


@pytest.fixture
def member_user(db):
    """Create and return a member user."""
    return make_user('member', first_name='Mia', last_name='Member')


@pytest.fixture
def invited_user(db):
    """Create and return a user with a pending invite."""
    return make_user('invitee', first_name='Ivan', last_name='Invitee')


@pytest.fixture
def group_other_user(db):
    """Create and return a user not in any group."""
    return make_user('outsider', first_name='Otto', last_name='Outsider')


@pytest.fixture
def owner_client(group_owner):
    return client_for(group_owner)


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def member_client(member_user):
    return client_for(member_user)


@pytest.fixture
def invited_client(invited_user):
    return client_for(invited_user)


@pytest.fixture
def other_client(group_other_user):
    return client_for(group_other_user)


@pytest.fixture
def group(db, group_owner):
    """Create and return a test group with the creator as Joined admin."""
    group = Group.objects.create(
        name='Flatmates',
        description='Rent, bills and groceries',
        created_by=group_owner,
    )
    add_membership(group, group_owner, is_admin=True, invited_by=group_owner)
    return group


@pytest.fixture
def group_with_members(group, admin_user, member_user, invited_user):
    """Group with creator, admin, member and a pending invite."""
    add_membership(group, admin_user, is_admin=True)
    add_membership(group, member_user)
    add_membership(group, invited_user, status=GroupMemberStatus.INVITED, invited_by=member_user)
    return group


@pytest.fixture
def member_expense(group_with_members, member_user, group_owner):
    """Member paid 30.00 split evenly with the creator."""
    txn = Transaction.objects.create(
        group=group_with_members,
        amount=Decimal('30.00'),
        description='Groceries',
        payer=member_user,
        created_by=member_user,
    )
    TransactionDetail.objects.create(transaction=txn, recipient=member_user, amount=Decimal('15.00'))
    TransactionDetail.objects.create(transaction=txn, recipient=group_owner, amount=Decimal('15.00'))
    return txn
