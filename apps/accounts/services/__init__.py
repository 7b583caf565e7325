"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
)
from .user_registration import register_user

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    # Services
    'register_user',
]
