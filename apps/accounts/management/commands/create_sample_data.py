"""
Management command to create sample data for local development.

Usage:
    python manage.py create_sample_data
    python manage.py create_sample_data --clear
    python manage.py create_sample_data --wishlist-only

This creates:
- 3 users (admin, campus pastor, team leader)
- 2 expense requests with items and their first status event
- The DMV building move wish list
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User, Role, UserStatus, Campus
from apps.expenses.models import (
    ExpenseRequest,
    ExpenseItem,
    ExpenseStatus,
    ExpenseCategory,
    StatusEvent,
    Team,
    Urgency,
)
from apps.wishlist.models import WishlistItem


SAMPLE_USERS = [
    ('admin@church.com', 'Church Admin', Role.ADMIN, 'admin123'),
    ('pastor@church.com', 'Campus Pastor', Role.CAMPUS_PASTOR, 'pastor123'),
    ('leader@church.com', 'Team Leader', Role.LEADER, 'leader123'),
]

# (title, category, price_cents, quantity_needed, priority, purchase_url)
WISHLIST_ITEMS = [
    ('Washing of the Chairs', 'Maintenance', 150000, 1, 3,
     'https://www.angieslist.com/companylist/us/va/reston/upholstery-cleaning.htm'),
    ('Tables for Welfare', 'Furniture', 30000, 6, 3,
     'https://www.amazon.com/s?k=folding+tables+for+church'),
    ('Feather Flag', 'Signage', 15000, 1, 3,
     'https://www.amazon.com/s?k=feather+flag+church+sign'),
    ('Keyboard CCW', 'Music', 8000, 1, 2,
     'https://www.amazon.com/s?k=digital+piano+keyboard'),
    ('Signage and Parking', 'Signage', 50000, 1, 3,
     'https://www.homedepot.com/s/signage'),
    ('Coffee Maker', 'Kitchen', 15000, 1, 1,
     'https://www.amazon.com/s?k=commercial+coffee+maker'),
    ('First Aid Kit', 'Safety', 5000, 2, 1,
     'https://www.amazon.com/s?k=first+aid+kit+professional'),
    ('Camera (CCTV)', 'Security', 20000, 1, 1,
     'https://www.amazon.com/s?k=cctv+security+camera+system'),
    ('Internet', 'Technology', 10000, 1, 3,
     'https://www.verizon.com/business/internet/'),
    ('Children Chairs', 'Furniture', 2500, 20, 3,
     'https://www.amazon.com/s?k=childrens+chairs+for+church'),
    ("Table for Pastor's Office", 'Furniture', 40000, 1, 1,
     'https://www.amazon.com/s?k=office+desk+pastor'),
    ('Bins', 'Storage', 1500, 10, 3,
     'https://www.amazon.com/s?k=storage+bins+church+supplies'),
]


class Command(BaseCommand):
    help = 'Create sample users, expenses and wish list items'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Remove previously seeded data before creating it again',
        )
        parser.add_argument(
            '--wishlist-only',
            action='store_true',
            help='Only seed the wish list',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing sample data...')
            self.clear_data(wishlist_only=options['wishlist_only'])

        self.stdout.write('Creating sample data...')

        if not options['wishlist_only']:
            users = self.create_users()
            self.create_expenses(users)

        self.create_wishlist()

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        if not options['wishlist_only']:
            self.stdout.write('')
            self.stdout.write('Test accounts:')
            for email, _, role, password in SAMPLE_USERS:
                self.stdout.write(f'  {email} / {password} ({role})')

    def clear_data(self, wishlist_only=False):
        """Delete seeded rows; confirmations and contributions cascade."""
        titles = [entry[0] for entry in WISHLIST_ITEMS]
        WishlistItem.objects.filter(title__in=titles).delete()
        if wishlist_only:
            return
        emails = [entry[0] for entry in SAMPLE_USERS]
        ExpenseRequest.objects.filter(requester__email__in=emails).delete()
        User.objects.filter(email__in=emails).delete()

    def create_users(self):
        self.stdout.write('  Creating users...')

        users = {}
        for email, name, role, password in SAMPLE_USERS:
            user, created = User.objects.get_or_create(
                email=email,
                defaults={
                    'name': name,
                    'role': role,
                    'campus': Campus.DMV,
                    'status': UserStatus.ACTIVE,
                    'email_verified_at': timezone.now(),
                }
            )
            if created:
                user.set_password(password)
                user.save(update_fields=['password'])
            users[role] = user

        return users

    def create_expenses(self, users):
        self.stdout.write('  Creating expense requests...')

        samples = [
            {
                'requester': users[Role.CAMPUS_PASTOR],
                'title': 'Worship Team Equipment',
                'status': ExpenseStatus.SUBMITTED,
                'urgency': Urgency.VERY_URGENT,
                'campus': Campus.BOSTON,
                'team': Team.CREATIVE,
                'category': ExpenseCategory.EQUIPMENT_PURCHASE,
                'description': 'New microphone and audio cables for worship team',
                'items': [('Microphone', 1, 18000), ('Audio cables', 2, 3500)],
            },
            {
                'requester': users[Role.ADMIN],
                'title': 'Office Supplies',
                'status': ExpenseStatus.APPROVED,
                'urgency': Urgency.URGENT,
                'campus': Campus.DMV,
                'team': Team.ADMINISTRATION,
                'category': ExpenseCategory.ADMINISTRATIVE_EXPENSES,
                'description': 'Paper, pens, and other office supplies',
                'items': [('Paper and pens', 1, 5000)],
            },
        ]

        for sample in samples:
            items = sample.pop('items')
            if ExpenseRequest.objects.filter(title=sample['title'], requester=sample['requester']).exists():
                continue

            expense = ExpenseRequest.objects.create(
                amount_cents=sum(quantity * unit for _, quantity, unit in items),
                **sample
            )
            ExpenseItem.objects.bulk_create([
                ExpenseItem(
                    expense=expense,
                    description=description,
                    quantity=quantity,
                    unit_price_cents=unit,
                    amount_cents=quantity * unit,
                )
                for description, quantity, unit in items
            ])
            StatusEvent.objects.create(
                expense=expense,
                from_status=None,
                to_status=ExpenseStatus.SUBMITTED,
                actor=expense.requester,
            )
            if expense.status != ExpenseStatus.SUBMITTED:
                StatusEvent.objects.create(
                    expense=expense,
                    from_status=ExpenseStatus.SUBMITTED,
                    to_status=expense.status,
                    actor=users[Role.ADMIN],
                )

    def create_wishlist(self):
        self.stdout.write('  Creating wish list items...')

        for title, category, price_cents, quantity_needed, priority, purchase_url in WISHLIST_ITEMS:
            WishlistItem.objects.get_or_create(
                title=title,
                defaults={
                    'category': category,
                    'price_cents': price_cents,
                    'quantity_needed': quantity_needed,
                    'priority': priority,
                    'purchase_url': purchase_url,
                }
            )
