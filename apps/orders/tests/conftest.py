import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.orders.models import Order, OrderStatus, OrderStatusEntry
from apps.stores.models import Store


UTC = ZoneInfo('UTC')

# Monday 2025-01-06, 10:00 UTC: inside the store's weekday hours
OPEN_NOW = datetime(2025, 1, 6, 10, 0, tzinfo=UTC)

# Monday 2025-01-06, 21:00 UTC: after closing
CLOSED_NOW = datetime(2025, 1, 6, 21, 0, tzinfo=UTC)

WEEKDAY = {'open': '08:00', 'close': '20:00'}

SCHEDULE = {
    'monday': WEEKDAY,
    'tuesday': WEEKDAY,
    'wednesday': WEEKDAY,
    'thursday': WEEKDAY,
    'friday': WEEKDAY,
    'saturday': {'open': '09:00', 'close': '17:00'},
    'sunday': {'is_closed': True},
}

ITEMS = [
    {'name': 'Latte', 'price': '4.00', 'quantity': 2, 'category': 'coffee', 'size': 'Medium'},
    {'name': 'Bagel', 'price': '3.50', 'quantity': 1, 'category': 'food'},
]


def client_for(user):
    """Return an API client authenticated as ``user`` using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


class RecordingNotifier:
    """Collects notifications instead of sending them."""

    def __init__(self):
        self.sent = []

    def notify(self, customer_id, title, message, payload):
        self.sent.append({
            'customer_id': customer_id,
            'title': title,
            'message': message,
            'payload': payload,
        })


class BrokenNotifier:
    def notify(self, customer_id, title, message, payload):
        raise ConnectionError('push service unavailable')


@pytest.fixture
def now():
    return OPEN_NOW


@pytest.fixture
def items():
    return [dict(item) for item in ITEMS]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def customer(db):
    return User.objects.create_user(
        email='customer@example.com',
        password='TestPass123!',
        display_name='Customer',
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        email='othercustomer@example.com',
        password='TestPass123!',
        display_name='Other Customer',
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
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def store(db, shop_owner):
    return Store.objects.create(
        name='Corner Coffee Downtown',
        address='1 Main Street',
        owner=shop_owner,
        timezone='UTC',
        hours=SCHEDULE,
    )


@pytest.fixture
def closed_store(db, shop_owner):
    """A store that is closed every day."""
    return Store.objects.create(
        name='Corner Coffee Warehouse',
        address='4 Dock Lane',
        owner=shop_owner,
        timezone='UTC',
        hours={day: {'is_closed': True} for day in SCHEDULE},
    )


def make_order(customer, store, status=OrderStatus.PENDING, created_at=OPEN_NOW):
    """Insert an order directly, with a matching history row."""
    order = Order.objects.create(
        customer=customer,
        store=store,
        items=ITEMS,
        total_amount=Decimal('11.50'),
        status=status,
        estimated_ready_time=created_at + timedelta(minutes=11),
        created_at=created_at,
    )
    OrderStatusEntry.objects.create(order=order, status=status, timestamp=created_at)
    return order


@pytest.fixture
def pending_order(customer, store):
    return make_order(customer, store)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def customer_client(customer):
    return client_for(customer)


@pytest.fixture
def other_customer_client(other_customer):
    return client_for(other_customer)


@pytest.fixture
def owner_client(shop_owner):
    return client_for(shop_owner)


@pytest.fixture
def other_owner_client(other_shop_owner):
    return client_for(other_shop_owner)


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)
