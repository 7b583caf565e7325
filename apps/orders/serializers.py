from typing import Optional

from rest_framework import serializers
from .models import Order, OrderStatus, OrderStatusEntry
from apps.accounts.serializers import UserMinimalSerializer
from apps.stores.serializers import StoreMinimalSerializer, OpeningInstantSerializer


ITEM_SIZES = ['Small', 'Medium', 'Large']


# =============================================================================
# Input Serializers
# =============================================================================

class OrderItemSerializer(serializers.Serializer):
    """
    A single line item as submitted by the app.

    Only ``category`` and ``quantity`` affect timing; the rest is carried
    on the order for the store.
    """

    menu_item_id = serializers.CharField(max_length=64, required=False)
    name = serializers.CharField(max_length=200)
    price = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)
    category = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    size = serializers.ChoiceField(choices=ITEM_SIZES, required=False)
    extras = serializers.ListField(
        child=serializers.CharField(max_length=100),
        required=False
    )
    special_instructions = serializers.CharField(max_length=500, required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
    """
    Validate input for placing an order.

    ``store`` and ``items`` may be omitted here; the service reports
    which of them is missing so precondition errors keep their order.
    """

    store = serializers.UUIDField(required=False, allow_null=True)
    items = OrderItemSerializer(many=True, required=False, allow_empty=True)
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class OrderStatusUpdateSerializer(serializers.Serializer):
    """Validate input for PATCH /api/orders/{id}/status/."""

    status = serializers.ChoiceField(choices=OrderStatus.choices)


# =============================================================================
# Output Serializers
# =============================================================================

class OrderStatusEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusEntry
        fields = ['status', 'timestamp']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order with history and derived timing fields."""

    customer = UserMinimalSerializer(read_only=True)
    store = StoreMinimalSerializer(read_only=True)
    status_history = OrderStatusEntrySerializer(many=True, read_only=True)
    time_remaining = serializers.SerializerMethodField()
    is_late = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id',
            'customer',
            'store',
            'items',
            'status',
            'status_history',
            'total_amount',
            'estimated_ready_time',
            'actual_ready_time',
            'time_remaining',
            'is_late',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_time_remaining(self, obj) -> Optional[int]:
        return obj.time_remaining(self.context.get('now'))

    def get_is_late(self, obj) -> bool:
        return obj.is_late(self.context.get('now'))


class StoreClosedResponseSerializer(serializers.Serializer):
    """Body returned when an order is rejected because the store is closed."""

    error = serializers.CharField()
    code = serializers.CharField()
    next_opening = OpeningInstantSerializer(allow_null=True)
