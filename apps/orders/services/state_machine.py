"""
Order status transition table.

    pending ──> preparing ──> ready ──> delivered
       │            │
       └────────────┴──> cancelled

Forward moves belong to the store; either side may cancel while the
order is pending or preparing. Anything not listed here is rejected.
"""

import enum
from typing import FrozenSet, Optional

from apps.orders.models import OrderStatus


class ActorRole(enum.Enum):
    CUSTOMER = 'customer'
    OPERATOR = 'operator'


_OPERATOR = frozenset({ActorRole.OPERATOR})
_ANYONE = frozenset({ActorRole.CUSTOMER, ActorRole.OPERATOR})

TRANSITIONS = {
    (OrderStatus.PENDING, OrderStatus.PREPARING): _OPERATOR,
    (OrderStatus.PREPARING, OrderStatus.READY): _OPERATOR,
    (OrderStatus.READY, OrderStatus.DELIVERED): _OPERATOR,
    (OrderStatus.PENDING, OrderStatus.CANCELLED): _ANYONE,
    (OrderStatus.PREPARING, OrderStatus.CANCELLED): _ANYONE,
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PREPARING})

# Statuses the customer hears about
NOTIFIABLE_STATUSES = frozenset({
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
})


def next_statuses(from_status) -> FrozenSet[OrderStatus]:
    """Statuses reachable in one step from ``from_status``."""
    return frozenset(to for (frm, to) in TRANSITIONS if frm == from_status)


def is_valid_transition(from_status, to_status) -> bool:
    return (from_status, to_status) in TRANSITIONS


def can_trigger(from_status, to_status, role: ActorRole) -> bool:
    """True if ``role`` may perform this transition."""
    return role in TRANSITIONS.get((from_status, to_status), frozenset())


def resolve_actor_role(order, user) -> Optional[ActorRole]:
    """
    Work out how ``user`` relates to ``order``.

    Store operators and admins act as OPERATOR (even on their own orders);
    the ordering customer acts as CUSTOMER; anyone else gets None.
    """
    if order.store.is_operated_by(user):
        return ActorRole.OPERATOR
    if user.is_authenticated and order.customer_id == user.id:
        return ActorRole.CUSTOMER
    return None
