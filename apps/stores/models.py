from django.conf import settings
from django.db import models
import uuid


def default_store_timezone():
    return settings.TIME_ZONE


class Store(models.Model):
    """A coffee shop customers can order from."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=300)
    phone = models.CharField(max_length=32, blank=True)

    owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='stores'
    )

    # IANA timezone the weekly hours are expressed in
    timezone = models.CharField(max_length=64, default=default_store_timezone)

    # Weekly schedule: {"monday": {"open": "08:00", "close": "20:00", "is_closed": false}, ...}
    hours = models.JSONField(default=dict, blank=True)

    is_active = models.BooleanField(default=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stores'
        indexes = [
            models.Index(fields=['owner'], name='stores_owner_idx'),
            models.Index(fields=['is_active'], name='stores_is_active_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name

    def is_operated_by(self, user):
        """Return True if ``user`` may run this store's orders."""
        if not user or not user.is_authenticated:
            return False
        return user.is_admin or self.owner_id == user.id
