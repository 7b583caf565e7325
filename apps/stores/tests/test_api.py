import uuid

import pytest
from django.urls import reverse
from rest_framework import status
from apps.stores.models import Store
from apps.stores.tests.conftest import make_schedule


CLOSED_ONLY = {'is_closed': True}


# =============================================================================
# Store Read Tests
# =============================================================================

@pytest.mark.django_db
class TestStoreList:
    """Tests for GET /api/stores/"""

    def test_list_is_public(self, api_client, store):
        url = reverse('stores:store-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == store.name
        assert 'is_open' in response.data['results'][0]

    def test_list_hides_inactive_stores(self, api_client, store):
        store.is_active = False
        store.save()

        response = api_client.get(reverse('stores:store-list'))

        assert response.data['count'] == 0

    def test_admin_sees_inactive_stores(self, admin_client, store):
        store.is_active = False
        store.save()

        response = admin_client.get(reverse('stores:store-list'))

        assert response.data['count'] == 1

    def test_retrieve_store(self, api_client, store):
        url = reverse('stores:store-detail', args=[store.id])
        response = api_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['hours']['monday']['open'] == '08:00'
        assert response.data['timezone'] == 'UTC'


@pytest.mark.django_db
class TestStoreStatus:
    """Tests for GET /api/stores/{id}/status/"""

    def test_open_before_closing(self, api_client, store):
        url = reverse('stores:store-status', args=[store.id])
        response = api_client.get(url, {'at': '2025-01-06T19:59:00Z'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_open'] is True
        assert response.data['display_text'] == 'Open'
        assert response.data['today_hours_text'] == '8:00 AM - 8:00 PM'
        assert response.data['next_opening'] is None

    def test_closed_at_closing_time(self, api_client, store):
        url = reverse('stores:store-status', args=[store.id])
        response = api_client.get(url, {'at': '2025-01-06T20:00:00Z'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_open'] is False
        assert response.data['display_text'] == 'Closed'

        next_opening = response.data['next_opening']
        assert next_opening['weekday'] == 'tuesday'
        assert next_opening['time_of_day'] == '08:00'
        assert next_opening['is_today'] is False
        assert next_opening['timestamp'].startswith('2025-01-07T08:00')

    def test_defaults_to_now(self, api_client, store):
        url = reverse('stores:store-status', args=[store.id])
        response = api_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert 'is_open' in response.data

    def test_invalid_at(self, api_client, store):
        url = reverse('stores:store-status', args=[store.id])
        response = api_client.get(url, {'at': 'yesterday'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_store(self, api_client, db):
        url = reverse('stores:store-status', args=[uuid.uuid4()])
        response = api_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Store Write Tests
# =============================================================================

@pytest.mark.django_db
class TestStoreCreate:
    """Tests for POST /api/stores/"""

    def _payload(self, owner, **overrides):
        data = {
            'name': 'Harbour Coffee',
            'address': '2 Quay Road',
            'owner': str(owner.id),
            'timezone': 'Europe/London',
            'hours': make_schedule(),
        }
        data.update(overrides)
        return data

    def test_admin_creates_store(self, admin_client, shop_owner):
        url = reverse('stores:store-list')
        response = admin_client.post(url, self._payload(shop_owner), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        store = Store.objects.get(name='Harbour Coffee')
        assert store.owner == shop_owner
        assert store.timezone == 'Europe/London'

    def test_customer_cannot_create_store(self, customer_client, shop_owner):
        url = reverse('stores:store-list')
        response = customer_client.post(url, self._payload(shop_owner), format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'insufficient_permissions'
        assert not Store.objects.exists()

    def test_owner_must_be_coffee_shop(self, admin_client, customer):
        url = reverse('stores:store-list')
        response = admin_client.post(url, self._payload(customer), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_store_owner'

    def test_rejects_invalid_hours(self, admin_client, shop_owner):
        hours = make_schedule(monday={'open': '20:00', 'close': '08:00'})
        url = reverse('stores:store-list')
        response = admin_client.post(url, self._payload(shop_owner, hours=hours), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['hours']['monday'] == (
            'Closing time must be after opening time for monday'
        )

    def test_rejects_unknown_timezone(self, admin_client, shop_owner):
        url = reverse('stores:store-list')
        response = admin_client.post(
            url, self._payload(shop_owner, timezone='Mars/Olympus'), format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'timezone' in response.data

    def test_unauthenticated(self, api_client, shop_owner):
        url = reverse('stores:store-list')
        response = api_client.post(url, self._payload(shop_owner), format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestStoreUpdate:
    """Tests for PATCH /api/stores/{id}/"""

    def test_owner_updates_hours(self, owner_client, store):
        hours = make_schedule(sunday={'open': '10:00', 'close': '14:00'})
        url = reverse('stores:store-detail', args=[store.id])
        response = owner_client.patch(url, {'hours': hours}, format='json')

        assert response.status_code == status.HTTP_200_OK
        store.refresh_from_db()
        assert store.hours['sunday'] == {'open': '10:00', 'close': '14:00'}

    def test_admin_updates_any_store(self, admin_client, store):
        url = reverse('stores:store-detail', args=[store.id])
        response = admin_client.patch(url, {'name': 'Renamed'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        store.refresh_from_db()
        assert store.name == 'Renamed'

    def test_other_owner_cannot_update(self, other_owner_client, store):
        url = reverse('stores:store-detail', args=[store.id])
        response = other_owner_client.patch(url, {'name': 'Mine now'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        store.refresh_from_db()
        assert store.name == 'Corner Coffee Downtown'

    def test_invalid_hours_rejected(self, owner_client, store):
        url = reverse('stores:store-detail', args=[store.id])
        response = owner_client.patch(url, {'hours': {'monday': CLOSED_ONLY}}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        store.refresh_from_db()
        assert store.hours == make_schedule()

    def test_unknown_store(self, owner_client, db):
        url = reverse('stores:store-detail', args=[uuid.uuid4()])
        response = owner_client.patch(url, {'name': 'Ghost'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_stores_cannot_be_deleted(self, admin_client, store):
        url = reverse('stores:store-detail', args=[store.id])
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
