"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data [--clear]

This creates:
- 4 users (admin, alice, bob, charlie)
- 2 groups (Flatmates, Ski Trip)
- Memberships, including a pending invite
- Expenses and a repayment
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupMemberStatus
from apps.transactions.models import Transaction, TransactionDetail


SAMPLE_EMAILS = [
    'admin@example.com',
    'alice@example.com',
    'bob@example.com',
    'charlie@example.com',
]


class Command(BaseCommand):
    help = 'Create sample data for trying out the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Remove previously created sample data first',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing sample data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        groups = self.create_groups(users)
        self.create_transactions(users, groups)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (superuser)')
        self.stdout.write('  alice@example.com / password123')
        self.stdout.write('  bob@example.com / password123')
        self.stdout.write('  charlie@example.com / password123')

    def clear_data(self):
        """Delete the sample users' groups, then the users themselves."""
        sample_users = User.objects.filter(email__in=SAMPLE_EMAILS)
        # Groups protect their creator, so they go first
        Group.objects.filter(created_by__in=sample_users).delete()
        sample_users.delete()

    def create_user(self, email, username, password, **extra_fields):
        user, _ = User.objects.get_or_create(
            email=email,
            defaults={'username': username, **extra_fields},
        )
        user.set_password(password)
        user.save()
        return user

    def create_users(self):
        """Create test users."""
        self.stdout.write('  Creating users...')

        admin = self.create_user(
            'admin@example.com', 'admin', 'admin123',
            first_name='Admin', last_name='User', is_staff=True, is_superuser=True,
        )
        alice = self.create_user(
            'alice@example.com', 'alice', 'password123', first_name='Alice', last_name='Anders',
        )
        bob = self.create_user(
            'bob@example.com', 'bob', 'password123', first_name='Bob', last_name='Berg',
        )
        charlie = self.create_user(
            'charlie@example.com', 'charlie', 'password123', first_name='Charlie', last_name='Cole',
        )

        return {
            'admin': admin,
            'alice': alice,
            'bob': bob,
            'charlie': charlie,
        }

    def add_member(self, group, user, invited_by, status=GroupMemberStatus.JOINED, is_admin=False):
        membership, _ = GroupMember.objects.get_or_create(
            group=group,
            member=user,
            defaults={'invited_by': invited_by, 'status': status, 'is_admin': is_admin},
        )
        return membership

    def create_groups(self, users):
        """Create groups with members."""
        self.stdout.write('  Creating groups...')

        flatmates, _ = Group.objects.get_or_create(
            name='Flatmates',
            created_by=users['alice'],
            defaults={'description': 'Rent, bills and groceries'},
        )
        self.add_member(flatmates, users['alice'], users['alice'], is_admin=True)
        self.add_member(flatmates, users['bob'], users['alice'])
        self.add_member(flatmates, users['charlie'], users['alice'], is_admin=True)

        ski_trip, _ = Group.objects.get_or_create(
            name='Ski Trip',
            created_by=users['bob'],
            defaults={'description': 'Chalet, lift passes and fuel'},
        )
        self.add_member(ski_trip, users['bob'], users['bob'], is_admin=True)
        self.add_member(ski_trip, users['alice'], users['bob'])
        self.add_member(ski_trip, users['charlie'], users['alice'], status=GroupMemberStatus.INVITED)

        return {
            'flatmates': flatmates,
            'ski_trip': ski_trip,
        }

    def record(self, group, payer, amount, shares, description=''):
        if Transaction.objects.filter(group=group, description=description, amount=amount).exists():
            return
        txn = Transaction.objects.create(
            group=group,
            amount=amount,
            description=description,
            payer=payer,
            created_by=payer,
        )
        TransactionDetail.objects.bulk_create([
            TransactionDetail(transaction=txn, recipient=recipient, amount=share)
            for recipient, share in shares
        ])

    def create_transactions(self, users, groups):
        """Create expenses and one repayment."""
        self.stdout.write('  Creating transactions...')

        alice, bob, charlie = users['alice'], users['bob'], users['charlie']

        self.record(
            groups['flatmates'], alice, Decimal('90.00'),
            [(alice, Decimal('30.00')), (bob, Decimal('30.00')), (charlie, Decimal('30.00'))],
            description='Electricity bill',
        )
        self.record(
            groups['flatmates'], bob, Decimal('42.60'),
            [(alice, Decimal('21.30')), (charlie, Decimal('21.30'))],
            description='Groceries',
        )
        # Charlie pays alice back for electricity
        self.record(
            groups['flatmates'], alice, Decimal('-30.00'),
            [(charlie, Decimal('-30.00'))],
            description='Electricity repayment',
        )
        self.record(
            groups['ski_trip'], bob, Decimal('240.00'),
            [(alice, Decimal('120.00')), (bob, Decimal('120.00'))],
            description='Lift passes',
        )
