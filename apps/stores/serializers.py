from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rest_framework import serializers
from .models import Store
from .services.store_hours import validate_schedule, get_store_status


def _validate_hours(value):
    result = validate_schedule(value)
    if not result.is_valid:
        raise serializers.ValidationError(result.errors)
    return value


def _validate_timezone(value):
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise serializers.ValidationError('Unknown timezone')
    return value


# =============================================================================
# Input Serializers
# =============================================================================

class StoreCreateSerializer(serializers.Serializer):
    """
    Validate input for creating a store.

    Fields:
        owner (UUID): Coffee shop account that will operate the store
        hours (dict): Full weekly schedule, all seven days required
    """

    name = serializers.CharField(max_length=200)
    address = serializers.CharField(max_length=300)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    owner = serializers.UUIDField()
    timezone = serializers.CharField(max_length=64, required=False)
    hours = serializers.JSONField()
    is_active = serializers.BooleanField(required=False, default=True)

    def validate_hours(self, value):
        return _validate_hours(value)

    def validate_timezone(self, value):
        return _validate_timezone(value)


class StoreUpdateSerializer(serializers.Serializer):
    """Validate input for updating a store; every field is optional."""

    name = serializers.CharField(max_length=200, required=False)
    address = serializers.CharField(max_length=300, required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    timezone = serializers.CharField(max_length=64, required=False)
    hours = serializers.JSONField(required=False)
    is_active = serializers.BooleanField(required=False)

    def validate_hours(self, value):
        return _validate_hours(value)

    def validate_timezone(self, value):
        return _validate_timezone(value)


class StoreStatusQuerySerializer(serializers.Serializer):
    """Query parameters for GET /api/stores/{id}/status/."""

    at = serializers.DateTimeField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class OpeningInstantSerializer(serializers.Serializer):
    timestamp = serializers.DateTimeField()
    weekday = serializers.CharField()
    time_of_day = serializers.CharField()
    is_today = serializers.BooleanField()


class StoreStatusSerializer(serializers.Serializer):
    """Serializer for the evaluator's StoreStatus."""

    is_open = serializers.BooleanField()
    display_text = serializers.CharField()
    today_hours_text = serializers.CharField(allow_null=True)
    next_opening = OpeningInstantSerializer(allow_null=True)


class StoreSerializer(serializers.ModelSerializer):
    """Full store representation including its current open state."""

    is_open = serializers.SerializerMethodField()

    class Meta:
        model = Store
        fields = [
            'id',
            'name',
            'address',
            'phone',
            'owner',
            'timezone',
            'hours',
            'is_active',
            'is_open',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_is_open(self, obj) -> bool:
        return get_store_status(obj).is_open


class StoreMinimalSerializer(serializers.ModelSerializer):
    """Minimal store info for nested serialization."""

    class Meta:
        model = Store
        fields = ['id', 'name', 'address']
        read_only_fields = fields
