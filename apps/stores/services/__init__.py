"""
Stores app services layer.

The hours evaluator is pure; store management wraps persistence.
"""

from .exceptions import (
    StoresServiceError,
    StoreNotFoundError,
    InvalidScheduleError,
    InvalidStoreOwnerError,
    InsufficientPermissionsError,
)

from .store_hours import (
    TimeOfDay,
    DayHours,
    OpeningInstant,
    StoreStatus,
    ScheduleValidationResult,
    evaluate,
    next_opening_time,
    validate_schedule,
    ensure_valid_schedule,
    format_time,
    get_store_status,
)

from .store_management import (
    create_store,
    get_store_by_id,
    update_store,
)


__all__ = [
    # Exceptions
    'StoresServiceError',
    'StoreNotFoundError',
    'InvalidScheduleError',
    'InvalidStoreOwnerError',
    'InsufficientPermissionsError',

    # Opening hours
    'TimeOfDay',
    'DayHours',
    'OpeningInstant',
    'StoreStatus',
    'ScheduleValidationResult',
    'evaluate',
    'next_opening_time',
    'validate_schedule',
    'ensure_valid_schedule',
    'format_time',
    'get_store_status',

    # Store management
    'create_store',
    'get_store_by_id',
    'update_store',
]
