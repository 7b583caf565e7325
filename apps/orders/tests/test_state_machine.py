import itertools

import pytest

from apps.orders.models import OrderStatus, ACTIVE_STATUSES
from apps.orders.services import (
    ActorRole,
    TRANSITIONS,
    CANCELLABLE_STATUSES,
    next_statuses,
    is_valid_transition,
    can_trigger,
)


ALLOWED = {
    ('pending', 'preparing'): {ActorRole.OPERATOR},
    ('preparing', 'ready'): {ActorRole.OPERATOR},
    ('ready', 'delivered'): {ActorRole.OPERATOR},
    ('pending', 'cancelled'): {ActorRole.CUSTOMER, ActorRole.OPERATOR},
    ('preparing', 'cancelled'): {ActorRole.CUSTOMER, ActorRole.OPERATOR},
}


@pytest.mark.parametrize(
    'from_status,to_status',
    list(itertools.product(OrderStatus.values, repeat=2)),
)
def test_transition_table_is_exhaustive(from_status, to_status):
    allowed = ALLOWED.get((from_status, to_status), set())

    assert is_valid_transition(from_status, to_status) is bool(allowed)
    for role in ActorRole:
        assert can_trigger(from_status, to_status, role) is (role in allowed)


def test_table_only_uses_known_statuses():
    for from_status, to_status in TRANSITIONS:
        assert from_status in OrderStatus.values
        assert to_status in OrderStatus.values


@pytest.mark.parametrize('terminal', [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
def test_terminal_statuses_have_no_exits(terminal):
    assert next_statuses(terminal) == frozenset()


def test_happy_path():
    assert next_statuses(OrderStatus.PENDING) == {OrderStatus.PREPARING, OrderStatus.CANCELLED}
    assert next_statuses(OrderStatus.PREPARING) == {OrderStatus.READY, OrderStatus.CANCELLED}
    assert next_statuses(OrderStatus.READY) == {OrderStatus.DELIVERED}


def test_cancellable_statuses_are_active():
    assert CANCELLABLE_STATUSES == {OrderStatus.PENDING, OrderStatus.PREPARING}
    assert CANCELLABLE_STATUSES < set(ACTIVE_STATUSES)


def test_plain_strings_match_enum_members():
    assert is_valid_transition('ready', OrderStatus.DELIVERED)
    assert not is_valid_transition('ready', 'cancelled')
    assert not is_valid_transition('pending', 'shipped')
