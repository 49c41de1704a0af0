"""User authentication service."""

from django.contrib.auth import get_user_model

from apps.accounts.models import UserStatus, normalize_email_address

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()


def authenticate_user(*, email: str, password: str) -> User:
    """
    Check credentials and account status.

    Args:
        email: Login email (normalized before lookup)
        password: Plain-text password

    Returns:
        The authenticated User

    Raises:
        InvalidCredentialsError: Unknown email, no password set or wrong password
        InactiveAccountError: Account pending approval or suspended
    """
    try:
        user = User.objects.get(email=normalize_email_address(email))
    except User.DoesNotExist:
        raise InvalidCredentialsError("Invalid email or password")

    if not user.has_password or not user.check_password(password):
        raise InvalidCredentialsError("Invalid email or password")

    if user.status == UserStatus.PENDING_APPROVAL:
        raise InactiveAccountError("Your account is pending approval")

    if user.status == UserStatus.SUSPENDED:
        raise InactiveAccountError("Your account has been suspended")

    return user
