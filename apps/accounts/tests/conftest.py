import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus


def client_for(user):
    """Return an API client authenticated as ``user`` using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        username='test_user',
        password='TestPass123!',
        first_name='Test',
        last_name='User',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        username='inactive',
        password='TestPass123!',
        is_active=False,
    )


@pytest.fixture
def other_user(db):
    """Create and return another test user."""
    return User.objects.create_user(
        email='otheruser@example.com',
        username='other_user',
        password='OtherPass123!',
        first_name='Olivia',
        last_name='Other',
    )


@pytest.fixture
def authenticated_client(user):
    """Return an API client authenticated as ``user``."""
    return client_for(user)


@pytest.fixture
def other_client(other_user):
    """Return an API client authenticated as ``other_user``."""
    return client_for(other_user)


@pytest.fixture
def owned_group(db, user):
    """A group created by ``user``."""
    group = Group.objects.create(name='Flatmates', created_by=user)
    GroupMember.objects.create(
        group=group,
        member=user,
        invited_by=user,
        is_admin=True,
        status=GroupMemberStatus.JOINED,
    )
    return group


@pytest.fixture
def foreign_group(db, other_user):
    """A group created by ``other_user``."""
    group = Group.objects.create(name='Ski Trip', created_by=other_user)
    GroupMember.objects.create(
        group=group,
        member=other_user,
        invited_by=other_user,
        is_admin=True,
        status=GroupMemberStatus.JOINED,
    )
    return group
