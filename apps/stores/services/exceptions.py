"""
Domain-specific exceptions for stores app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class StoresServiceError(Exception):
    """Base exception for all stores service errors."""

    code = 'store_error'


class StoreNotFoundError(StoresServiceError):
    """Raised when a store does not exist."""

    code = 'store_not_found'


class InvalidScheduleError(StoresServiceError):
    """
    Raised when a weekly schedule fails validation.

    ``errors`` maps each offending weekday to its message.
    """

    code = 'invalid_schedule'

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or {}


class InvalidStoreOwnerError(StoresServiceError):
    """Raised when a store owner is not a coffee shop account."""

    code = 'invalid_store_owner'


class InsufficientPermissionsError(StoresServiceError):
    """Raised when a user lacks required permissions for an action."""

    code = 'insufficient_permissions'
