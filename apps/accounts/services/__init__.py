"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    RegistrationEmailError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    TokenAlreadyUsedError,
    UserNotFoundError,
    EmailNotVerifiedError,
    PasswordAlreadySetError,
    InvalidUserStateError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .session_management import create_session, get_active_session, delete_session
from .email_verification import verify_user_email
from .password_reset import set_initial_password, request_password_reset, reset_password
from .user_administration import (
    list_users,
    approve_user,
    deny_user,
    suspend_user,
    update_user_role,
    update_user_status,
    update_profile,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'RegistrationEmailError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidTokenError',
    'TokenAlreadyUsedError',
    'UserNotFoundError',
    'EmailNotVerifiedError',
    'PasswordAlreadySetError',
    'InvalidUserStateError',
    # Services
    'register_user',
    'authenticate_user',
    'create_session',
    'get_active_session',
    'delete_session',
    'verify_user_email',
    'set_initial_password',
    'request_password_reset',
    'reset_password',
    'list_users',
    'approve_user',
    'deny_user',
    'suspend_user',
    'update_user_role',
    'update_user_status',
    'update_profile',
]
