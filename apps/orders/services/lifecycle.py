"""
Order lifecycle service.

Creates orders and moves them through the status table in
``state_machine``. Every write runs in a transaction: either the status,
history row and timestamps all change, or nothing does. Notifications go
out after the transaction commits.

Database failures (including lock and statement timeouts configured
through ``DB_TIMEOUT_SECONDS``) surface as ``InfrastructureError``.
"""

import functools
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction, DatabaseError, IntegrityError
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.orders.models import (
    Order,
    OrderStatus,
    OrderStatusEntry,
    ACTIVE_STATUSES,
)
from apps.stores.models import Store
from apps.stores.services import get_store_status

from .exceptions import (
    ActiveOrderExistsError,
    EmptyOrderError,
    MissingStoreError,
    StoreNotFoundError,
    InvalidLineItemError,
    StoreClosedError,
    OrderNotFoundError,
    InvalidTransitionError,
    NotCancellableError,
    InsufficientPermissionsError,
    InfrastructureError,
)
from .notifications import Notifier, notify_status_change
from .state_machine import (
    ActorRole,
    CANCELLABLE_STATUSES,
    can_trigger,
    is_valid_transition,
    resolve_actor_role,
)
from .timing import estimate_ready_time


logger = logging.getLogger(__name__)


def _translate_database_errors(func):
    """Re-raise database failures escaping ``func`` as InfrastructureError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            logger.exception("Database failure in %s", func.__name__)
            raise InfrastructureError() from e

    return wrapper


# =============================================================================
# Creation
# =============================================================================

def _has_active_order(customer: User) -> bool:
    return Order.objects.filter(customer=customer, status__in=ACTIVE_STATUSES).exists()


def _find_by_idempotency_key(customer: User, key: Optional[str]) -> Optional[Order]:
    if not key:
        return None
    return Order.objects.filter(customer=customer, idempotency_key=key).first()


def _clean_line_items(items: Sequence[Any]) -> List[Dict[str, Any]]:
    cleaned = []
    for position, item in enumerate(items, start=1):
        if not isinstance(item, Mapping):
            raise InvalidLineItemError(f"Item {position} must be an object")

        quantity = item.get('quantity', 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidLineItemError(
                f"Item {position}: quantity must be a whole number of at least 1"
            )

        category = item.get('category', '')
        if category is not None and not isinstance(category, str):
            raise InvalidLineItemError(f"Item {position}: category must be text")

        cleaned.append(dict(item))
    return cleaned


def _clean_total(total_amount) -> Decimal:
    try:
        total = Decimal(str(total_amount))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidLineItemError("Total amount must be a number")

    if not total.is_finite() or total < 0:
        raise InvalidLineItemError("Total amount cannot be negative")
    return total


def _get_store(store_id) -> Store:
    try:
        return Store.objects.get(id=store_id)
    except (Store.DoesNotExist, ValidationError, ValueError):
        raise StoreNotFoundError(f"Store with ID {store_id} not found")


def _ensure_store_open(store: Store, now: datetime) -> None:
    if not getattr(settings, 'ORDER_REQUIRE_OPEN_STORE', True):
        return

    if not store.is_active:
        raise StoreClosedError(f"{store.name} is not accepting orders")

    store_status = get_store_status(store, at=now)
    if not store_status.is_open:
        raise StoreClosedError(
            f"{store.name} is currently closed",
            next_opening=store_status.next_opening,
        )


@_translate_database_errors
def create_order(
    *,
    customer: User,
    store_id: Optional[UUID],
    items: Sequence[Mapping[str, Any]],
    total_amount,
    now: Optional[datetime] = None,
    idempotency_key: Optional[str] = None
) -> Order:
    """
    Place a new order for a customer.

    Preconditions are checked in this order and the first failure wins:
    active order, empty items, missing store, malformed items or total,
    unknown store, store closed.

    The customer row is locked for the duration of the check-then-insert,
    and the partial unique constraint on active orders backs it up.

    Args:
        customer: User placing the order
        store_id: UUID of the store
        items: Line items; each needs ``quantity`` >= 1 and may carry a
            ``category`` plus any commerce fields (name, price, size...)
        total_amount: Order total, must not be negative
        now: Creation instant (default: current time)
        idempotency_key: Optional client key; repeating it returns the
            order created the first time

    Returns:
        The created (or previously created) Order

    Raises:
        ActiveOrderExistsError: Customer already has an active order
        EmptyOrderError: No items
        MissingStoreError: No store given
        InvalidLineItemError: Malformed item or negative total
        StoreNotFoundError: Store doesn't exist
        StoreClosedError: Store is closed or inactive
        InfrastructureError: Database unavailable or timed out
    """
    now = now or timezone.now()

    with transaction.atomic():
        # Serialize order placement per customer
        User.objects.select_for_update().filter(pk=customer.pk).first()

        existing = _find_by_idempotency_key(customer, idempotency_key)
        if existing is not None:
            logger.info("Replayed order %s for key %s", existing.id, idempotency_key)
            return existing

        if _has_active_order(customer):
            raise ActiveOrderExistsError()
        if not items:
            raise EmptyOrderError()
        if not store_id:
            raise MissingStoreError()

        line_items = _clean_line_items(items)
        total = _clean_total(total_amount)
        store = _get_store(store_id)
        _ensure_store_open(store, now)

        estimate = estimate_ready_time(line_items, now)

        try:
            with transaction.atomic():
                order = Order.objects.create(
                    customer=customer,
                    store=store,
                    items=line_items,
                    total_amount=total,
                    status=OrderStatus.PENDING,
                    estimated_ready_time=estimate.ready_at,
                    idempotency_key=idempotency_key or None,
                    created_at=now,
                )
        except IntegrityError:
            existing = _find_by_idempotency_key(customer, idempotency_key)
            if existing is not None:
                return existing
            raise ActiveOrderExistsError()

        OrderStatusEntry.objects.create(
            order=order,
            status=OrderStatus.PENDING,
            timestamp=now
        )

    logger.info(
        "Created order %s for customer %s at store %s (ready in %s min)",
        order.id, customer.id, store.id, estimate.minutes
    )
    return order


# =============================================================================
# Transitions
# =============================================================================

def _lock_order(order_id: UUID, actor: User):
    """Fetch and lock an order, returning it with the actor's role."""
    try:
        order = Order.objects.select_for_update().get(id=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise OrderNotFoundError(f"Order with ID {order_id} not found")

    role = resolve_actor_role(order, actor)
    if role is None:
        raise OrderNotFoundError(f"Order with ID {order_id} not found")
    return order, role


def _apply_transition(order: Order, new_status, role: ActorRole, now: datetime) -> None:
    if new_status not in OrderStatus.values:
        raise InvalidTransitionError(f"Unknown order status: {new_status}")

    old_status = order.status
    if not is_valid_transition(old_status, new_status):
        logger.debug("Rejected order %s transition %s -> %s", order.id, old_status, new_status)
        raise InvalidTransitionError(from_status=old_status, to_status=new_status)

    if not can_trigger(old_status, new_status, role):
        raise InsufficientPermissionsError(
            f"Only the store can change an order to {new_status}"
        )

    order.status = OrderStatus(new_status)
    if order.status == OrderStatus.READY:
        order.actual_ready_time = now
    order.save(update_fields=['status', 'actual_ready_time', 'updated_at'])

    OrderStatusEntry.objects.create(order=order, status=order.status, timestamp=now)

    logger.info("Order %s: %s -> %s (%s)", order.id, old_status, order.status, role.value)


@_translate_database_errors
def transition_order(
    *,
    order_id: UUID,
    new_status: str,
    actor: User,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None
) -> Order:
    """
    Move an order to a new status.

    Args:
        order_id: UUID of the order
        new_status: Target status
        actor: User requesting the change (store operator, admin or customer)
        now: Transition instant (default: current time)
        notifier: Notifier to use instead of the configured one

    Returns:
        Updated Order

    Raises:
        OrderNotFoundError: Order doesn't exist or isn't visible to the actor
        InvalidTransitionError: Transition not allowed from current status
        InsufficientPermissionsError: Actor may not trigger this transition
        InfrastructureError: Database unavailable or timed out
    """
    now = now or timezone.now()

    with transaction.atomic():
        order, role = _lock_order(order_id, actor)
        _apply_transition(order, new_status, role, now)
        transaction.on_commit(lambda: notify_status_change(order, notifier))

    return order


@_translate_database_errors
def cancel_order(
    *,
    order_id: UUID,
    actor: User,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None
) -> Order:
    """
    Cancel an order that is still pending or preparing.

    Raises:
        OrderNotFoundError: Order doesn't exist or isn't visible to the actor
        NotCancellableError: Order is ready, delivered or already cancelled
        InfrastructureError: Database unavailable or timed out
    """
    now = now or timezone.now()

    with transaction.atomic():
        order, role = _lock_order(order_id, actor)
        if order.status not in CANCELLABLE_STATUSES:
            raise NotCancellableError(
                f"Order is {order.status} and can no longer be cancelled"
            )
        _apply_transition(order, OrderStatus.CANCELLED, role, now)
        transaction.on_commit(lambda: notify_status_change(order, notifier))

    return order


# =============================================================================
# Queries
# =============================================================================

@_translate_database_errors
def get_active_order(customer: User) -> Optional[Order]:
    """Return the customer's current pending, preparing or ready order."""
    return (
        Order.objects
        .filter(customer=customer, status__in=ACTIVE_STATUSES)
        .select_related('store')
        .order_by('-created_at')
        .first()
    )


def list_orders_for(user: User) -> QuerySet:
    """
    Orders visible to a user, newest first.

    Admins see all orders, coffee shop accounts see their stores' orders
    (and their own), customers see their own.
    """
    queryset = Order.objects.select_related('store', 'customer').prefetch_related('status_history')

    if user.is_admin:
        return queryset.order_by('-created_at')
    if user.is_store_operator:
        return queryset.filter(Q(store__owner=user) | Q(customer=user)).order_by('-created_at')
    return queryset.filter(customer=user).order_by('-created_at')


@_translate_database_errors
def get_order_for(*, order_id: UUID, user: User) -> Order:
    """
    Get an order the user is allowed to see.

    Raises:
        OrderNotFoundError: Order doesn't exist or belongs to someone else
    """
    try:
        order = list_orders_for(user).get(id=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise OrderNotFoundError(f"Order with ID {order_id} not found")
    return order
