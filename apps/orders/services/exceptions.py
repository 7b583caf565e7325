"""
Domain exceptions for orders app.

Business-rule errors carry a stable ``code`` and a message that can be
shown to the customer as-is, so every rejected operation says which
precondition failed.

Exception Hierarchy:
    OrderServiceError (base)
    ├── ActiveOrderExistsError
    ├── EmptyOrderError
    ├── MissingStoreError
    ├── StoreNotFoundError
    ├── InvalidLineItemError
    ├── StoreClosedError
    ├── OrderNotFoundError
    ├── InvalidTransitionError
    ├── NotCancellableError
    └── InsufficientPermissionsError

    InfrastructureError (separate: persistence failed or timed out)

Usage:
    from apps.orders.services.exceptions import ActiveOrderExistsError

    try:
        order = create_order(...)
    except OrderServiceError as e:
        return Response({'error': str(e), 'code': e.code}, status=400)
"""


class OrderServiceError(Exception):
    """Base exception for all order business-rule violations."""

    code = 'order_error'
    default_message = 'Order request could not be completed.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class ActiveOrderExistsError(OrderServiceError):
    """Raised when the customer already has a pending, preparing or ready order."""

    code = 'active_order_exists'
    default_message = (
        'You have an active order in progress. Please wait for it to be '
        'completed before placing a new order.'
    )


class EmptyOrderError(OrderServiceError):
    """Raised when an order has no line items."""

    code = 'empty_order'
    default_message = 'Order must contain at least one item'


class MissingStoreError(OrderServiceError):
    """Raised when no store was given for an order."""

    code = 'missing_store'
    default_message = 'Store is required'


class StoreNotFoundError(OrderServiceError):
    """Raised when the store given for an order does not exist."""

    code = 'store_not_found'
    default_message = 'Store not found'


class InvalidLineItemError(OrderServiceError):
    """Raised when a line item or the order total is malformed."""

    code = 'invalid_item'
    default_message = 'Invalid item in order'


class StoreClosedError(OrderServiceError):
    """
    Raised when ordering from a store that is not open.

    ``next_opening`` holds the store's next OpeningInstant, if any.
    """

    code = 'store_closed'
    default_message = 'Store is currently closed'

    def __init__(self, message=None, next_opening=None):
        super().__init__(message)
        self.next_opening = next_opening


class OrderNotFoundError(OrderServiceError):
    """Raised when an order does not exist or is not visible to the user."""

    code = 'order_not_found'
    default_message = 'Order not found'


class InvalidTransitionError(OrderServiceError):
    """Raised when a status change is not in the transition table."""

    code = 'invalid_transition'
    default_message = 'Invalid status transition'

    def __init__(self, message=None, from_status=None, to_status=None):
        if message is None and from_status and to_status:
            message = f'Cannot change order status from {from_status} to {to_status}'
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status


class NotCancellableError(OrderServiceError):
    """Raised when cancelling an order that is already ready or finished."""

    code = 'not_cancellable'
    default_message = 'Order can no longer be cancelled'


class InsufficientPermissionsError(OrderServiceError):
    """Raised when the user may not perform this change on the order."""

    code = 'insufficient_permissions'
    default_message = 'You do not have permission to perform this action'


class InfrastructureError(Exception):
    """
    Raised when persistence is unavailable or times out.

    Not a business-rule error: nothing was changed and the caller may retry.
    """

    code = 'infrastructure_error'

    def __init__(self, message='Order storage is temporarily unavailable'):
        super().__init__(message)
