from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from decimal import Decimal
import math
import uuid


class OrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PREPARING = 'preparing', 'Preparing'
    READY = 'ready', 'Ready'
    DELIVERED = 'delivered', 'Delivered'
    CANCELLED = 'cancelled', 'Cancelled'


# A customer may hold at most one order in these statuses.
ACTIVE_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
)

TERMINAL_STATUSES = (
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
)


class Order(models.Model):
    """A customer's order at a single store."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='orders'
    )
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.PROTECT,
        related_name='orders'
    )

    # Line items as submitted: name, price, quantity, category, size, extras...
    items = models.JSONField(default=list, encoder=DjangoJSONEncoder)

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING
    )

    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    estimated_ready_time = models.DateTimeField(null=True, blank=True)
    actual_ready_time = models.DateTimeField(null=True, blank=True)

    # Client-supplied key making order submission safe to retry
    idempotency_key = models.CharField(max_length=64, null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        constraints = [
            models.UniqueConstraint(
                fields=['customer'],
                condition=Q(status__in=list(ACTIVE_STATUSES)),
                name='one_active_order_per_customer',
            ),
            models.UniqueConstraint(
                fields=['customer', 'idempotency_key'],
                condition=Q(idempotency_key__isnull=False),
                name='unique_order_idempotency_key',
            ),
        ]
        indexes = [
            models.Index(fields=['customer', 'status'], name='orders_customer_status_idx'),
            models.Index(fields=['store', 'created_at'], name='orders_store_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Order #{self.short_id} ({self.status})"

    @property
    def short_id(self):
        return str(self.id)[-4:]

    @property
    def is_active(self):
        return self.status in ACTIVE_STATUSES

    def time_remaining(self, now=None):
        """Whole minutes until the estimated ready time, never negative."""
        if self.estimated_ready_time is None:
            return None
        now = now or timezone.now()
        seconds = (self.estimated_ready_time - now).total_seconds()
        return max(0, math.floor(seconds / 60 + 0.5))

    def is_late(self, now=None):
        """True once the estimate has passed and the order is still open."""
        if self.estimated_ready_time is None or self.status in TERMINAL_STATUSES:
            return False
        now = now or timezone.now()
        return now > self.estimated_ready_time


class OrderStatusEntry(models.Model):
    """Append-only audit row for each status an order has been in."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='status_history'
    )
    status = models.CharField(max_length=20, choices=OrderStatus.choices)
    timestamp = models.DateTimeField()

    class Meta:
        db_table = 'order_status_history'
        ordering = ['timestamp', 'id']

    def __str__(self):
        return f"{self.order_id}: {self.status} at {self.timestamp:%Y-%m-%d %H:%M}"
