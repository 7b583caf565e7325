"""
Customer notifications for order status changes.

Delivery is best-effort: a failing notifier is logged and never undoes
or fails the status change that triggered it. Nothing is retried here.

The notifier class is configured with ``settings.ORDER_NOTIFIER`` (dotted
path). Any object with a ``notify(customer_id, title, message, payload)``
method works.
"""

import logging
from typing import Any, Dict, Optional, Protocol

from django.conf import settings
from django.utils.module_loading import import_string

from apps.orders.models import Order, OrderStatus

from .state_machine import NOTIFIABLE_STATUSES


logger = logging.getLogger(__name__)

DEFAULT_NOTIFIER = 'apps.orders.services.notifications.LoggingNotifier'

STATUS_MESSAGES = {
    OrderStatus.PREPARING: 'Your order is now being prepared!',
    OrderStatus.READY: 'Great news! Your order is ready for pickup.',
    OrderStatus.DELIVERED: 'Your order has been delivered. Enjoy!',
    OrderStatus.CANCELLED: 'Your order has been cancelled.',
}


class Notifier(Protocol):
    def notify(self, customer_id, title: str, message: str, payload: Dict[str, Any]) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the log instead of a push service."""

    def notify(self, customer_id, title, message, payload):
        logger.info("Notify customer %s: %s - %s %s", customer_id, title, message, payload)


def get_notifier() -> Notifier:
    return import_string(getattr(settings, 'ORDER_NOTIFIER', DEFAULT_NOTIFIER))()


def build_status_message(order: Order) -> Optional[Dict[str, Any]]:
    """Title, message and payload for the order's current status, or None."""
    if order.status not in NOTIFIABLE_STATUSES:
        return None
    return {
        'title': f'Order #{order.short_id} Update',
        'message': STATUS_MESSAGES[order.status],
        'payload': {
            'type': 'ORDER_UPDATE',
            'order_id': str(order.id),
            'status': str(order.status),
        },
    }


def notify_status_change(order: Order, notifier: Optional[Notifier] = None) -> bool:
    """
    Tell the customer their order changed status.

    Returns:
        True if the notifier accepted the notification.
    """
    content = build_status_message(order)
    if content is None:
        return False

    try:
        (notifier or get_notifier()).notify(
            order.customer_id,
            content['title'],
            content['message'],
            content['payload'],
        )
    except Exception:
        logger.exception("Failed to notify customer about order %s", order.id)
        return False

    return True
