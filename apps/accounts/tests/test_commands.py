import pytest
from io import StringIO
from django.core.management import call_command

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus
from apps.groups.services import get_group_balances
from apps.transactions.models import Transaction


@pytest.mark.django_db
class TestCreateSampleData:
    """Tests for the create_sample_data management command."""

    def test_creates_sample_data(self):
        out = StringIO()
        call_command('create_sample_data', stdout=out)

        assert 'Sample data created successfully!' in out.getvalue()
        assert User.objects.filter(email__endswith='@example.com').count() == 4
        assert User.objects.get(username='admin').is_superuser
        assert Group.objects.count() == 2
        assert Transaction.objects.count() == 4

        invite = GroupMember.objects.get(member__username='charlie', group__name='Ski Trip')
        assert invite.status == GroupMemberStatus.INVITED

    def test_is_idempotent(self):
        call_command('create_sample_data', stdout=StringIO())
        call_command('create_sample_data', stdout=StringIO())

        assert User.objects.count() == 4
        assert Group.objects.count() == 2
        assert Transaction.objects.count() == 4

    def test_clear_recreates(self):
        call_command('create_sample_data', stdout=StringIO())
        call_command('create_sample_data', '--clear', stdout=StringIO())

        assert Group.objects.count() == 2
        assert GroupMember.objects.count() == 6

    def test_sample_balances_add_up(self):
        call_command('create_sample_data', stdout=StringIO())
        alice = User.objects.get(username='alice')
        flatmates = Group.objects.get(name='Flatmates')

        data = get_group_balances(group_id=flatmates.id, user=alice)

        assert sum(entry['balance'] for entry in data['balances']) == 0
