from io import StringIO

import pytest
from django.core.management import call_command

from apps.accounts.models import User, Role
from apps.expenses.models import ExpenseRequest, ExpenseStatus
from apps.wishlist.models import WishlistItem


def run(*args):
    out = StringIO()
    call_command('create_sample_data', *args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
class TestCreateSampleData:

    def test_seeds_everything(self):
        output = run()

        assert 'Sample data created successfully!' in output
        assert User.objects.get(email='admin@church.com').role == Role.ADMIN
        assert User.objects.get(email='leader@church.com').check_password('leader123')
        office = ExpenseRequest.objects.get(title='Office Supplies')
        assert office.status == ExpenseStatus.APPROVED
        assert office.status_events.count() == 2
        assert WishlistItem.objects.get(title='Children Chairs').quantity_needed == 20

    def test_is_idempotent(self):
        run()
        run()

        assert User.objects.filter(email__endswith='@church.com').count() == 3
        assert ExpenseRequest.objects.count() == 2
        assert WishlistItem.objects.count() == 12

    def test_wishlist_only_with_clear(self):
        run()
        WishlistItem.objects.filter(title='Bins').update(quantity_needed=99)

        run('--clear', '--wishlist-only')

        assert WishlistItem.objects.get(title='Bins').quantity_needed == 10
        assert ExpenseRequest.objects.count() == 2
