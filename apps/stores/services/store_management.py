"""
Store management service.

Handles store creation and updates. Weekly hours are validated here so
that the evaluator only ever reads well-formed schedules.
"""

import logging
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.db import transaction

from apps.accounts.models import User, UserRole
from apps.stores.models import Store

from .exceptions import (
    StoreNotFoundError,
    InvalidScheduleError,
    InvalidStoreOwnerError,
    InsufficientPermissionsError,
)
from .store_hours import ensure_valid_schedule

logger = logging.getLogger(__name__)


def _check_timezone(name: str) -> None:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidScheduleError(f"Unknown timezone: {name}", errors={'timezone': 'Unknown timezone'})


@transaction.atomic
def create_store(
    *,
    created_by: User,
    owner_id: UUID,
    name: str,
    address: str,
    hours: dict,
    phone: str = '',
    timezone: Optional[str] = None,
    is_active: bool = True
) -> Store:
    """
    Create a store for a coffee shop account (admin only).

    Args:
        created_by: User performing the creation (must be admin)
        owner_id: UUID of the coffee shop user who will operate the store
        name: Store name
        address: Street address
        hours: Weekly schedule
        phone: Optional phone number
        timezone: IANA timezone of the hours (defaults to the project timezone)
        is_active: Whether the store accepts orders

    Returns:
        Created Store instance

    Raises:
        InsufficientPermissionsError: If created_by is not an admin
        InvalidStoreOwnerError: If owner is missing or not a coffee shop
        InvalidScheduleError: If hours or timezone are invalid
    """
    if not created_by.is_admin:
        raise InsufficientPermissionsError("Only admins can create stores")

    owner = User.objects.filter(id=owner_id).first()
    if owner is None or owner.role != UserRole.COFFEE_SHOP:
        raise InvalidStoreOwnerError("Invalid store owner")

    ensure_valid_schedule(hours)

    fields = dict(
        name=name,
        address=address,
        phone=phone,
        owner=owner,
        hours=hours,
        is_active=is_active,
    )
    if timezone:
        _check_timezone(timezone)
        fields['timezone'] = timezone

    store = Store.objects.create(**fields)
    logger.info("Created store %s for owner %s", store.id, owner.id)
    return store


def get_store_by_id(*, store_id: UUID) -> Store:
    """
    Get a store by ID.

    Raises:
        StoreNotFoundError: If store doesn't exist
    """
    try:
        return Store.objects.select_related('owner').get(id=store_id)
    except Store.DoesNotExist:
        raise StoreNotFoundError(f"Store with ID {store_id} not found")


@transaction.atomic
def update_store(
    *,
    store_id: UUID,
    user: User,
    name: Optional[str] = None,
    address: Optional[str] = None,
    phone: Optional[str] = None,
    hours: Optional[dict] = None,
    timezone: Optional[str] = None,
    is_active: Optional[bool] = None
) -> Store:
    """
    Update store details (owner or admin).

    Uses select_for_update to prevent concurrent modifications.

    Raises:
        StoreNotFoundError: If store doesn't exist
        InsufficientPermissionsError: If user does not operate the store
        InvalidScheduleError: If new hours or timezone are invalid
    """
    try:
        store = (
            Store.objects
            .select_for_update()
            .get(id=store_id)
        )
    except Store.DoesNotExist:
        raise StoreNotFoundError(f"Store with ID {store_id} not found")

    if not store.is_operated_by(user):
        raise InsufficientPermissionsError("Only the store owner can update the store")

    update_fields = ['updated_at']

    for field_name, value in (
        ('name', name),
        ('address', address),
        ('phone', phone),
        ('is_active', is_active),
    ):
        if value is not None:
            setattr(store, field_name, value)
            update_fields.append(field_name)

    if hours is not None:
        ensure_valid_schedule(hours)
        store.hours = hours
        update_fields.append('hours')

    if timezone is not None:
        _check_timezone(timezone)
        store.timezone = timezone
        update_fields.append('timezone')

    store.save(update_fields=update_fields)

    return store
