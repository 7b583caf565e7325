"""
Orders app services layer.

Timing and the transition table are pure; the lifecycle functions own
persistence, run in transactions and trigger notifications.
"""

from .exceptions import (
    OrderServiceError,
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

from .timing import (
    LineItem,
    ReadyTimeEstimate,
    estimate_by_category,
    estimate_flat,
    estimate_ready_time,
)

from .state_machine import (
    ActorRole,
    TRANSITIONS,
    CANCELLABLE_STATUSES,
    NOTIFIABLE_STATUSES,
    next_statuses,
    is_valid_transition,
    can_trigger,
    resolve_actor_role,
)

from .notifications import (
    LoggingNotifier,
    get_notifier,
    notify_status_change,
)

from .lifecycle import (
    create_order,
    transition_order,
    cancel_order,
    get_active_order,
    list_orders_for,
    get_order_for,
)


__all__ = [
    # Exceptions
    'OrderServiceError',
    'ActiveOrderExistsError',
    'EmptyOrderError',
    'MissingStoreError',
    'StoreNotFoundError',
    'InvalidLineItemError',
    'StoreClosedError',
    'OrderNotFoundError',
    'InvalidTransitionError',
    'NotCancellableError',
    'InsufficientPermissionsError',
    'InfrastructureError',

    # Timing
    'LineItem',
    'ReadyTimeEstimate',
    'estimate_by_category',
    'estimate_flat',
    'estimate_ready_time',

    # State machine
    'ActorRole',
    'TRANSITIONS',
    'CANCELLABLE_STATUSES',
    'NOTIFIABLE_STATUSES',
    'next_statuses',
    'is_valid_transition',
    'can_trigger',
    'resolve_actor_role',

    # Notifications
    'LoggingNotifier',
    'get_notifier',
    'notify_status_change',

    # Lifecycle
    'create_order',
    'transition_order',
    'cancel_order',
    'get_active_order',
    'list_orders_for',
    'get_order_for',
]
