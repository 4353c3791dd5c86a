"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
    InvalidPasswordError,
)
from .user_registration import register_parent
from .user_authentication import authenticate_user
from .password_reset import request_password_reset, confirm_password_reset, change_password
from .profile_management import update_profile, list_parents

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidTokenError',
    'UserNotFoundError',
    'InvalidPasswordError',
    # Services
    'register_parent',
    'authenticate_user',
    'request_password_reset',
    'confirm_password_reset',
    'change_password',
    'update_profile',
    'list_parents',
]
