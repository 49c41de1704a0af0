import re

import pytest
from django.core import mail

from apps.wishlist.models import WishlistItem, WishlistConfirmation, WishlistContribution
from apps.wishlist.services import hash_ip

ALLOWED_EMAIL = 'wishlist-admin@example.com'


@pytest.fixture
def item_factory(db):
    def create(**overrides):
        fields = {
            'title': 'Folding chairs',
            'description': 'Chairs for the fellowship hall',
            'purchase_url': 'https://shop.example.com/chairs',
            'price_cents': 5000,
            'quantity_needed': 2,
        }
        fields.update(overrides)
        return WishlistItem.objects.create(**fields)

    return create


@pytest.fixture
def wishlist_item(item_factory):
    """Active item: 2 x 50.00, goal 100.00, open to contributions."""
    return item_factory(allow_contributions=True)


@pytest.fixture
def pledge(db):
    """Write ledger rows directly, bypassing the public checks."""

    def create(item, *, quantity=None, amount_cents=None, ip='10.0.0.1'):
        if quantity is not None:
            return WishlistConfirmation.objects.create(item=item, quantity=quantity, ip_hash=hash_ip(ip))
        return WishlistContribution.objects.create(item=item, amount_cents=amount_cents, ip_hash=hash_ip(ip))

    return create


def sent_code():
    """The 6-digit code from the most recent access code email."""
    return re.search(r'\b(\d{6})\b', mail.outbox[-1].body).group(1)
