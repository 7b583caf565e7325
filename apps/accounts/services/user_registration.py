"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from apps.accounts.models import UserRole
from .exceptions import UserRegistrationError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = "",
    phone_number: str = ""
) -> User:
    """
    Register a new customer account.

    Store operators and admins are never created through self-registration;
    they are provisioned from the admin site.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name
        phone_number: Optional phone number

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("Email already registered")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name,
            phone_number=phone_number,
            role=UserRole.CUSTOMER,
        )
    except IntegrityError:
        raise UserRegistrationError("Email already registered")

    logger.info("Registered customer %s", user.id)
    return user
