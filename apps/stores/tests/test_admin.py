import json

import pytest
from apps.stores.admin import StoreAdminForm
from apps.stores.tests.conftest import make_schedule


def form_data(owner, **overrides):
    data = {
        'name': 'Corner Coffee',
        'address': '1 Main St',
        'phone': '',
        'owner': str(owner.id),
        'timezone': 'Europe/Prague',
        'hours': json.dumps(make_schedule()),
        'is_active': True,
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestStoreAdminForm:

    def test_valid_store(self, shop_owner):
        form = StoreAdminForm(data=form_data(shop_owner))

        assert form.is_valid(), form.errors

    def test_unknown_timezone_rejected(self, shop_owner):
        form = StoreAdminForm(data=form_data(shop_owner, timezone='Mars/Olympus'))

        assert not form.is_valid()
        assert 'timezone' in form.errors
        assert 'Unknown timezone: Mars/Olympus' in form.errors['timezone'][0]

    def test_invalid_hours_rejected(self, shop_owner):
        hours = make_schedule(monday={'open': '20:00', 'close': '08:00', 'is_closed': False})
        form = StoreAdminForm(data=form_data(shop_owner, hours=json.dumps(hours)))

        assert not form.is_valid()
        assert 'hours' in form.errors
