"""Parent registration service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model

from apps.accounts.models import UserRole

from .exceptions import UserRegistrationError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def register_parent(
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: str = '',
) -> User:
    """
    Register a new parent account.

    The welcome e-mail is sent after the transaction commits so a mail
    failure can never roll back the account.

    Args:
        email: Parent's email address
        password: Plain password (will be hashed)
        first_name: First name
        last_name: Last name
        phone: Contact phone

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    from apps.notifications.emails import send_welcome_email

    email = email.strip().lower()
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("A user with this email already exists")

    user = User.objects.create_user(
        email=email,
        password=password,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        phone=phone.strip(),
        role=UserRole.PARENT,
    )
    logger.info("Registered parent %s", user.email)

    transaction.on_commit(lambda: send_welcome_email(user))

    return user
