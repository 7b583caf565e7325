from django.contrib import admin

from .models import Order, OrderStatusEntry


class OrderStatusEntryInline(admin.TabularInline):
    model = OrderStatusEntry
    extra = 0
    can_delete = False
    readonly_fields = ['status', 'timestamp']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Read-mostly view of orders; status changes go through the API."""

    list_display = ['short_id', 'customer', 'store', 'status', 'total_amount', 'estimated_ready_time', 'created_at']
    list_filter = ['status', 'store']
    search_fields = ['id', 'customer__email', 'store__name']
    raw_id_fields = ['customer', 'store']
    readonly_fields = [
        'status',
        'items',
        'estimated_ready_time',
        'actual_ready_time',
        'idempotency_key',
        'created_at',
        'updated_at',
    ]
    inlines = [OrderStatusEntryInline]

    def has_delete_permission(self, request, obj=None):
        return False
