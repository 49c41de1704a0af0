from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone

from apps.wishlist.models import WishlistItem, WishlistConfirmation
from apps.wishlist.services import (
    list_items,
    get_item,
    get_active_item,
    create_item,
    update_item,
    delete_item,
    list_contributions,
    confirm_item,
    contribute_to_item,
    issue_access_code,
    verify_access_code,
    has_wishlist_access,
    is_email_allowed,
    WishlistItemNotFoundError,
    ItemFulfilledError,
    DonationExceedsNeedError,
    RateLimitExceededError,
    AccessCodeError,
    EmailNotAllowedError,
    NoPendingCodeError,
    AccessCodeExpiredError,
    InvalidAccessCodeError,
    TooManyCodeAttemptsError,
)
from .conftest import ALLOWED_EMAIL, sent_code


@pytest.mark.django_db
class TestProgress:

    def test_empty_item(self, wishlist_item):
        item = get_item(wishlist_item.id)

        assert item.goal_cents == 10000
        assert item.quantity_confirmed == 0
        assert item.contributed_cents == 0
        assert item.remaining_value_cents == 10000
        assert item.remaining_quantity == 2
        assert item.donors_count == 0

    def test_remaining_value_is_clamped(self, wishlist_item, pledge):
        pledge(wishlist_item, quantity=1)
        item = get_item(wishlist_item.id)
        assert item.confirmed_value_cents == 5000
        assert item.remaining_value_cents == 5000

        pledge(wishlist_item, amount_cents=6000)
        item = get_item(wishlist_item.id)
        assert item.confirmed_value_cents == 11000
        assert item.remaining_value_cents == 0
        assert item.donors_count == 2

    def test_confirmed_quantity_sums_pledges(self, wishlist_item, pledge):
        pledge(wishlist_item, quantity=2)

        item = get_item(wishlist_item.id)
        assert item.quantity_confirmed == 2
        assert item.remaining_quantity == 0

    def test_list_order_and_active_filter(self, item_factory):
        item_factory(title='Low', priority=1)
        item_factory(title='High', priority=5)
        item_factory(title='Hidden', priority=9, is_active=False)

        assert [i.title for i in list_items(active_only=True)] == ['High', 'Low']
        assert [i.title for i in list_items()] == ['Hidden', 'High', 'Low']


@pytest.mark.django_db
class TestItemCrud:

    def test_create_strips_and_nulls_text(self):
        item = create_item(
            title='  Projector ',
            description='   ',
            purchase_url='https://shop.example.com/projector',
            price_cents=45000,
            quantity_needed=1,
            image_url='',
        )

        assert item.title == 'Projector'
        assert item.description is None
        assert item.image_url is None
        assert item.goal_cents == 45000

    def test_partial_update(self, wishlist_item):
        item = update_item(item_id=wishlist_item.id, priority=7, is_active=False)

        assert item.priority == 7
        assert item.is_active is False
        assert item.title == 'Folding chairs'

    def test_update_missing(self):
        with pytest.raises(WishlistItemNotFoundError):
            update_item(item_id='00000000-0000-0000-0000-000000000000', priority=2)

    def test_delete_cascades(self, wishlist_item, pledge):
        pledge(wishlist_item, quantity=1)

        delete_item(item_id=wishlist_item.id)

        assert not WishlistItem.objects.exists()
        assert not WishlistConfirmation.objects.exists()
        with pytest.raises(WishlistItemNotFoundError):
            delete_item(item_id=wishlist_item.id)

    def test_contributions_listed(self, wishlist_item, pledge):
        first = pledge(wishlist_item, amount_cents=1000)
        second = pledge(wishlist_item, amount_cents=2000)

        assert set(list_contributions(item_id=wishlist_item.id)) == {first, second}

    def test_inactive_item_hidden_from_public(self, item_factory):
        item = item_factory(is_active=False)

        with pytest.raises(WishlistItemNotFoundError):
            get_active_item(item.id)


@pytest.mark.django_db
class TestConfirmItem:

    def test_confirm(self, wishlist_item):
        confirmation = confirm_item(
            item_id=wishlist_item.id,
            quantity=1,
            ip_address='192.0.2.10',
            user_agent='Firefox',
            donor_name='Grace',
            donor_email='',
        )

        assert confirmation.quantity == 1
        assert confirmation.donor_email is None
        assert confirmation.ip_hash != '192.0.2.10'
        assert len(confirmation.ip_hash) == 64

    def test_quantity_above_remaining(self, wishlist_item, pledge):
        pledge(wishlist_item, quantity=1)

        with pytest.raises(DonationExceedsNeedError, match='Only 1 still needed'):
            confirm_item(item_id=wishlist_item.id, quantity=2, ip_address='192.0.2.10')

    def test_fulfilled(self, wishlist_item, pledge):
        pledge(wishlist_item, quantity=2)

        with pytest.raises(ItemFulfilledError):
            confirm_item(item_id=wishlist_item.id, quantity=1, ip_address='192.0.2.10')

    def test_inactive(self, item_factory):
        item = item_factory(is_active=False)

        with pytest.raises(WishlistItemNotFoundError):
            confirm_item(item_id=item.id, quantity=1, ip_address='192.0.2.10')

    def test_rate_limited_per_address(self, item_factory, pledge):
        item = item_factory(quantity_needed=10)
        for _ in range(3):
            pledge(item, quantity=1, ip='192.0.2.10')

        with pytest.raises(RateLimitExceededError):
            confirm_item(item_id=item.id, quantity=1, ip_address='192.0.2.10')

        confirm_item(item_id=item.id, quantity=1, ip_address='192.0.2.99')

    def test_old_pledges_do_not_count(self, item_factory, pledge):
        item = item_factory(quantity_needed=10)
        for _ in range(3):
            pledge(item, quantity=1, ip='192.0.2.10')
        WishlistConfirmation.objects.update(created_at=timezone.now() - timedelta(minutes=6))

        confirm_item(item_id=item.id, quantity=1, ip_address='192.0.2.10')


@pytest.mark.django_db
class TestContributeToItem:

    def test_contribution_notifies_inbox(self, wishlist_item, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            contribution = contribute_to_item(
                item_id=wishlist_item.id,
                amount_cents=2500,
                ip_address='192.0.2.10',
                donor_name='Grace',
                note='For the youth room',
            )

        assert contribution.amount_cents == 2500
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['donations@example.com']
        assert mail.outbox[0].subject == 'New Wish List Contribution: Folding chairs'
        assert '$25.00' in mail.outbox[0].body

    def test_requires_contributions_enabled(self, item_factory):
        item = item_factory(allow_contributions=False)

        with pytest.raises(WishlistItemNotFoundError, match='not accepting contributions'):
            contribute_to_item(item_id=item.id, amount_cents=100, ip_address='192.0.2.10')

    def test_amount_above_remaining(self, wishlist_item, pledge):
        pledge(wishlist_item, quantity=1)

        with pytest.raises(DonationExceedsNeedError, match='5000 cents more'):
            contribute_to_item(item_id=wishlist_item.id, amount_cents=6000, ip_address='192.0.2.10')

    def test_fully_funded(self, wishlist_item, pledge):
        pledge(wishlist_item, amount_cents=10000)

        with pytest.raises(ItemFulfilledError):
            contribute_to_item(item_id=wishlist_item.id, amount_cents=100, ip_address='192.0.2.10')


@pytest.mark.django_db
class TestAccessCodes:

    def test_allow_list_is_case_insensitive(self):
        assert is_email_allowed('  Wishlist-Admin@Example.com ')
        assert not is_email_allowed('someone@example.com')
        assert not is_email_allowed('')

    def test_not_allowed(self):
        with pytest.raises(EmailNotAllowedError):
            issue_access_code(email='someone@example.com')
        assert mail.outbox == []

    def test_code_grants_access(self):
        token = issue_access_code(email=ALLOWED_EMAIL)

        assert mail.outbox[0].to == [ALLOWED_EMAIL]
        assert sent_code() not in token

        access = verify_access_code(email=ALLOWED_EMAIL, code=sent_code(), code_token=token)
        assert has_wishlist_access(access)
        assert not has_wishlist_access(access, now=timezone.now() + timedelta(hours=5))

    def test_wrong_code(self):
        token = issue_access_code(email=ALLOWED_EMAIL)
        wrong = '000000' if sent_code() != '000000' else '111111'

        with pytest.raises(InvalidAccessCodeError):
            verify_access_code(email=ALLOWED_EMAIL, code=wrong, code_token=token)

    def test_code_locked_after_repeated_wrong_guesses(self, settings):
        settings.WISHLIST_CODE_MAX_ATTEMPTS = 2
        token = issue_access_code(email=ALLOWED_EMAIL)
        for _ in range(2):
            with pytest.raises(InvalidAccessCodeError):
                verify_access_code(email=ALLOWED_EMAIL, code='000000', code_token=token)

        with pytest.raises(TooManyCodeAttemptsError):
            verify_access_code(email=ALLOWED_EMAIL, code=sent_code(), code_token=token)

    def test_new_code_resets_guesses(self, settings):
        settings.WISHLIST_CODE_MAX_ATTEMPTS = 1
        token = issue_access_code(email=ALLOWED_EMAIL)
        with pytest.raises(InvalidAccessCodeError):
            verify_access_code(email=ALLOWED_EMAIL, code='000000', code_token=token)

        fresh = issue_access_code(email=ALLOWED_EMAIL)
        access = verify_access_code(email=ALLOWED_EMAIL, code=sent_code(), code_token=fresh)

        assert has_wishlist_access(access)

    def test_expired_code(self):
        token = issue_access_code(email=ALLOWED_EMAIL, now=timezone.now() - timedelta(minutes=11))

        with pytest.raises(AccessCodeExpiredError):
            verify_access_code(email=ALLOWED_EMAIL, code=sent_code(), code_token=token)

    def test_missing_code(self):
        with pytest.raises(AccessCodeError, match='Code is required'):
            verify_access_code(email=ALLOWED_EMAIL, code='  ', code_token=None)

    def test_no_pending_code(self):
        with pytest.raises(NoPendingCodeError):
            verify_access_code(email=ALLOWED_EMAIL, code='123456', code_token=None)

        with pytest.raises(NoPendingCodeError):
            verify_access_code(email=ALLOWED_EMAIL, code='123456', code_token='tampered:value')

    def test_code_token_is_not_an_access_token(self):
        token = issue_access_code(email=ALLOWED_EMAIL)

        assert not has_wishlist_access(token)
        assert not has_wishlist_access(None)
