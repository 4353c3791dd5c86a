"""Password reset service."""

from django.db import transaction
from django.contrib.auth import get_user_model
import secrets

from .exceptions import UserNotFoundError, InvalidTokenError, InvalidPasswordError

User = get_user_model()


@transaction.atomic
def request_password_reset(*, email: str) -> str:
    """
    Generate password reset token for user and mail it.

    Args:
        email: User's email address

    Returns:
        Reset token

    Raises:
        UserNotFoundError: If user does not exist
    """
    from apps.notifications.emails import send_password_reset_email

    try:
        user = (
            User.objects
            .select_for_update()
            .get(email__iexact=email.strip(), is_active=True)
        )
    except User.DoesNotExist:
        raise UserNotFoundError(f"No active user with email: {email}")

    reset_token = secrets.token_urlsafe(32)
    user.reset_token = reset_token
    user.save(update_fields=['reset_token'])

    transaction.on_commit(lambda: send_password_reset_email(user, reset_token))

    return reset_token


@transaction.atomic
def confirm_password_reset(*, token: str, new_password: str) -> User:
    """
    Reset user password with token.

    Args:
        token: Reset token
        new_password: New password

    Returns:
        User instance

    Raises:
        InvalidTokenError: If token is invalid or expired
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(reset_token=token, is_active=True)
        )
    except User.DoesNotExist:
        raise InvalidTokenError("Invalid or expired reset token")

    user.set_password(new_password)
    user.reset_token = None
    user.save(update_fields=['password', 'reset_token'])

    return user


@transaction.atomic
def change_password(*, user: User, current_password: str, new_password: str) -> User:
    """Change the password of a logged-in user after checking the current one."""
    if not user.check_password(current_password):
        raise InvalidPasswordError("Current password is incorrect")

    user.set_password(new_password)
    user.reset_token = None
    user.save(update_fields=['password', 'reset_token'])
    return user
