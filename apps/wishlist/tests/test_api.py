import pytest
from django.conf import settings
from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from apps.wishlist.models import WishlistItem, WishlistConfirmation, WishlistContribution
from .conftest import ALLOWED_EMAIL, sent_code


@pytest.fixture
def item_payload():
    return {
        'title': 'Projector',
        'purchase_url': 'https://shop.example.com/projector',
        'price_cents': 45000,
        'quantity_needed': 1,
    }


def unlock(client):
    """Run the emailed code flow on the client and return it."""
    client.post(reverse('wishlist:access-code'), {'email': ALLOWED_EMAIL}, format='json')
    response = client.post(
        reverse('wishlist:verify-code'),
        {'email': ALLOWED_EMAIL, 'code': sent_code()},
        format='json'
    )
    assert response.status_code == status.HTTP_200_OK
    return client


# =============================================================================
# Admin
# =============================================================================

@pytest.mark.django_db
class TestAdminItemList:
    """Tests for GET/POST /api/admin/wishlist/"""

    def test_list_with_progress(self, admin_client, wishlist_item, pledge):
        pledge(wishlist_item, quantity=1)
        url = reverse('wishlist:admin-item-list')
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        item = response.data['items'][0]
        assert item['goal_cents'] == 10000
        assert item['remaining_value_cents'] == 5000
        assert item['quantity_confirmed'] == 1
        assert item['donors_count'] == 1

    def test_create(self, admin_client, item_payload):
        url = reverse('wishlist:admin-item-list')
        response = admin_client.post(url, item_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['item']['is_active'] is True
        assert response.data['item']['allow_contributions'] is False
        assert response.data['item']['currency'] == 'USD'
        assert WishlistItem.objects.filter(title='Projector').exists()

    @pytest.mark.parametrize('field,value', [
        ('purchase_url', 'not a url'),
        ('price_cents', 0),
        ('quantity_needed', 0),
        ('image_url', 'not a url'),
        ('title', '   '),
    ])
    def test_create_validation(self, admin_client, item_payload, field, value):
        item_payload[field] = value
        url = reverse('wishlist:admin-item-list')
        response = admin_client.post(url, item_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data['details']

    def test_leader_forbidden(self, leader_client):
        url = reverse('wishlist:admin-item-list')
        response = leader_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'Forbidden'

    def test_anonymous(self, api_client):
        url = reverse('wishlist:admin-item-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_listed_admin_user(self, leader_client, leader_user, settings):
        settings.WISHLIST_ADMIN_USER_IDS = [str(leader_user.id)]
        response = leader_client.get(reverse('wishlist:admin-item-list'))

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestAdminItemDetail:
    """Tests for PUT/DELETE /api/admin/wishlist/<id>/"""

    def test_partial_update(self, admin_client, wishlist_item):
        url = reverse('wishlist:admin-item-detail', kwargs={'item_id': wishlist_item.id})
        response = admin_client.put(url, {'priority': 4}, format='json')

        assert response.status_code == status.HTTP_200_OK
        wishlist_item.refresh_from_db()
        assert wishlist_item.priority == 4
        assert wishlist_item.title == 'Folding chairs'
        assert wishlist_item.allow_contributions is True

    def test_update_validation(self, admin_client, wishlist_item):
        url = reverse('wishlist:admin-item-detail', kwargs={'item_id': wishlist_item.id})
        response = admin_client.put(url, {'price_cents': -5}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_missing(self, admin_client):
        url = reverse('wishlist:admin-item-detail', kwargs={'item_id': '00000000-0000-0000-0000-000000000000'})
        response = admin_client.put(url, {'priority': 4}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Item not found'

    def test_delete(self, admin_client, wishlist_item, pledge):
        pledge(wishlist_item, amount_cents=500)
        url = reverse('wishlist:admin-item-detail', kwargs={'item_id': wishlist_item.id})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_200_OK
        assert not WishlistItem.objects.exists()
        assert not WishlistContribution.objects.exists()

    def test_contributions(self, admin_client, wishlist_item, pledge):
        pledge(wishlist_item, amount_cents=500)
        url = reverse('wishlist:admin-item-contributions', kwargs={'item_id': wishlist_item.id})
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['item']['title'] == 'Folding chairs'
        assert [c['amount_cents'] for c in response.data['contributions']] == [500]


@pytest.mark.django_db
class TestAccessCodeFlow:
    """Tests for the emailed one-time code gate."""

    def test_code_unlocks_admin_api(self, wishlist_item):
        client = unlock(APIClient())

        response = client.get(reverse('wishlist:admin-item-list'))
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['items']) == 1

    def test_access_cookie_is_http_only(self):
        client = APIClient()
        client.post(reverse('wishlist:access-code'), {'email': ALLOWED_EMAIL}, format='json')
        response = client.post(
            reverse('wishlist:verify-code'),
            {'email': ALLOWED_EMAIL, 'code': sent_code()},
            format='json'
        )

        cookie = response.cookies[settings.WISHLIST_ACCESS_COOKIE_NAME]
        assert cookie['httponly']
        assert cookie['max-age'] == settings.WISHLIST_ACCESS_TTL_HOURS * 60 * 60

    def test_email_not_allowed(self, api_client):
        response = api_client.post(
            reverse('wishlist:access-code'), {'email': 'someone@example.com'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'Email not allowed'
        assert mail.outbox == []

    def test_code_required(self, api_client):
        response = api_client.post(reverse('wishlist:verify-code'), {'email': ALLOWED_EMAIL}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Code is required'

    def test_no_code_requested(self, api_client):
        response = api_client.post(
            reverse('wishlist:verify-code'), {'email': ALLOWED_EMAIL, 'code': '123456'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'No valid code. Please request a new one.'

    def test_wrong_code(self, api_client):
        api_client.post(reverse('wishlist:access-code'), {'email': ALLOWED_EMAIL}, format='json')
        wrong = '000000' if sent_code() != '000000' else '111111'
        response = api_client.post(
            reverse('wishlist:verify-code'), {'email': ALLOWED_EMAIL, 'code': wrong}, format='json'
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert api_client.get(reverse('wishlist:admin-item-list')).status_code == status.HTTP_401_UNAUTHORIZED

    def test_too_many_wrong_codes(self, api_client, settings):
        settings.WISHLIST_CODE_MAX_ATTEMPTS = 1
        api_client.post(reverse('wishlist:access-code'), {'email': ALLOWED_EMAIL}, format='json')
        url = reverse('wishlist:verify-code')
        api_client.post(url, {'email': ALLOWED_EMAIL, 'code': '000000'}, format='json')

        response = api_client.post(url, {'email': ALLOWED_EMAIL, 'code': sent_code()}, format='json')

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.data['error'] == 'Too many attempts. Please request a new code.'
        assert response.cookies[settings.WISHLIST_CODE_COOKIE_NAME].value == ''


# =============================================================================
# Public
# =============================================================================

@pytest.mark.django_db
class TestPublicItem:
    """Tests for GET /api/dmv/wishlist/<id>/"""

    def test_get(self, api_client, wishlist_item):
        url = reverse('wishlist:public-item', kwargs={'item_id': wishlist_item.id})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['item']['remaining_value_cents'] == 10000
        assert 'donors_count' not in response.data['item']

    def test_inactive(self, api_client, item_factory):
        item = item_factory(is_active=False)
        url = reverse('wishlist:public-item', kwargs={'item_id': item.id})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestPublicConfirm:
    """Tests for POST /api/dmv/wishlist/<id>/confirm/"""

    def test_confirm(self, api_client, wishlist_item):
        url = reverse('wishlist:public-confirm', kwargs={'item_id': wishlist_item.id})
        response = api_client.post(url, {'quantity': 1, 'donor_name': 'Grace'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert WishlistConfirmation.objects.get().donor_name == 'Grace'

    def test_quantity_must_be_positive(self, api_client, wishlist_item):
        url = reverse('wishlist:public-confirm', kwargs={'item_id': wishlist_item.id})
        response = api_client.post(url, {'quantity': 0}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'quantity' in response.data['details']

    def test_too_many(self, api_client, wishlist_item):
        url = reverse('wishlist:public-confirm', kwargs={'item_id': wishlist_item.id})
        response = api_client.post(url, {'quantity': 3}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Cannot confirm 3 items. Only 2 still needed.'

    def test_rate_limit(self, api_client, item_factory):
        item = item_factory(quantity_needed=10)
        url = reverse('wishlist:public-confirm', kwargs={'item_id': item.id})
        for _ in range(3):
            assert api_client.post(url, {'quantity': 1}, format='json').status_code == status.HTTP_201_CREATED

        response = api_client.post(url, {'quantity': 1}, format='json')

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert WishlistConfirmation.objects.count() == 3


@pytest.mark.django_db
class TestPublicContribute:
    """Tests for POST /api/dmv/wishlist/<id>/contribute/"""

    def test_contribute(self, api_client, wishlist_item, django_capture_on_commit_callbacks):
        url = reverse('wishlist:public-contribute', kwargs={'item_id': wishlist_item.id})
        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post(url, {'amount_cents': 2000}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert mail.outbox[0].to == ['donations@example.com']
        item = api_client.get(reverse('wishlist:public-item', kwargs={'item_id': wishlist_item.id}))
        assert item.data['item']['remaining_value_cents'] == 8000

    def test_contributions_disabled(self, api_client, item_factory):
        item = item_factory()
        url = reverse('wishlist:public-contribute', kwargs={'item_id': item.id})
        response = api_client.post(url, {'amount_cents': 2000}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Item not found or not accepting contributions'

    def test_minimum_amount(self, api_client, wishlist_item):
        url = reverse('wishlist:public-contribute', kwargs={'item_id': wishlist_item.id})
        response = api_client.post(url, {'amount_cents': 0}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'amount_cents' in response.data['details']


@pytest.mark.django_db
class TestLegacyEndpoints:

    @pytest.mark.parametrize('method', ['get', 'post', 'delete'])
    def test_list_gone(self, api_client, method):
        response = getattr(api_client, method)(reverse('wishlist:legacy-list'))

        assert response.status_code == status.HTTP_410_GONE
        assert 'error' in response.data

    def test_confirmations_gone(self, admin_client, wishlist_item):
        url = reverse('wishlist:legacy-confirmations', kwargs={'item_id': wishlist_item.id})
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_410_GONE
