import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.stores.models import Store


WEEKDAY = {'open': '08:00', 'close': '20:00', 'is_closed': False}


def make_schedule(**overrides):
    """Mon-Fri 08:00-20:00, Saturday 09:00-17:00, Sunday closed."""
    schedule = {
        'monday': dict(WEEKDAY),
        'tuesday': dict(WEEKDAY),
        'wednesday': dict(WEEKDAY),
        'thursday': dict(WEEKDAY),
        'friday': dict(WEEKDAY),
        'saturday': {'open': '09:00', 'close': '17:00', 'is_closed': False},
        'sunday': {'is_closed': True},
    }
    schedule.update(overrides)
    return schedule


def client_for(user):
    """Return an API client authenticated as ``user`` using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def schedule():
    return make_schedule()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def shop_owner(db):
    return User.objects.create_user(
        email='shop@example.com',
        password='TestPass123!',
        display_name='Corner Coffee',
        role=UserRole.COFFEE_SHOP,
    )


@pytest.fixture
def other_shop_owner(db):
    return User.objects.create_user(
        email='othershop@example.com',
        password='TestPass123!',
        display_name='Other Coffee',
        role=UserRole.COFFEE_SHOP,
    )


@pytest.fixture
def customer(db):
    return User.objects.create_user(
        email='customer@example.com',
        password='TestPass123!',
        display_name='Customer',
    )


@pytest.fixture
def store(db, shop_owner, schedule):
    """A store open on weekdays, in UTC."""
    return Store.objects.create(
        name='Corner Coffee Downtown',
        address='1 Main Street',
        owner=shop_owner,
        timezone='UTC',
        hours=schedule,
    )


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def owner_client(shop_owner):
    return client_for(shop_owner)


@pytest.fixture
def other_owner_client(other_shop_owner):
    return client_for(other_shop_owner)


@pytest.fixture
def customer_client(customer):
    return client_for(customer)
