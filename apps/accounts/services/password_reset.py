"""Password setup and reset services."""

from datetime import timedelta
import logging
import secrets

from django.conf import settings
from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import TokenPurpose, VerificationToken, normalize_email_address
from apps.notifications.mailer import send_email
from apps.notifications.templates import password_reset_email

from .exceptions import (
    UserNotFoundError,
    InvalidTokenError,
    TokenAlreadyUsedError,
    EmailNotVerifiedError,
    PasswordAlreadySetError,
)

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def set_initial_password(*, email: str, password: str) -> User:
    """
    Set the first password of a verified account.

    Raises:
        UserNotFoundError: If no user has this email
        EmailNotVerifiedError: If the email has not been verified yet
        PasswordAlreadySetError: If the account already has a password
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(email=normalize_email_address(email))
        )
    except User.DoesNotExist:
        raise UserNotFoundError("User not found")

    if not user.is_email_verified:
        raise EmailNotVerifiedError("Please verify your email before setting a password")

    if user.has_password:
        raise PasswordAlreadySetError("Password has already been set for this account")

    user.set_password(password)
    user.save(update_fields=['password', 'updated_at'])
    return user


def request_password_reset(*, email: str) -> bool:
    """
    Email a password reset link when the account exists and has a password.

    Always succeeds from the caller's point of view so that the response
    does not reveal whether the email is registered.

    Returns:
        True if a reset email was issued
    """
    email = normalize_email_address(email)
    user = User.objects.filter(email=email).first()
    if user is None or not user.has_password:
        return False

    with transaction.atomic():
        VerificationToken.objects.filter(
            email=email,
            purpose=TokenPurpose.PASSWORD_RESET,
        ).delete()
        reset_token = VerificationToken.objects.create(
            email=email,
            token=secrets.token_hex(32),
            purpose=TokenPurpose.PASSWORD_RESET,
            expires_at=timezone.now() + timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES),
        )

    send_email(
        password_reset_email(name=user.get_display_name(), token=reset_token.token),
        email,
    )
    return True


def reset_password(*, token: str, new_password: str) -> User:
    """
    Reset user password with a single-use token.

    Args:
        token: Reset token from the email link
        new_password: New password

    Returns:
        User instance

    Raises:
        InvalidTokenError: If token is unknown, for another purpose, or expired
        TokenAlreadyUsedError: If the token was consumed before, including by
            a concurrent request
    """
    try:
        reset_token = VerificationToken.objects.get(token=token)
    except VerificationToken.DoesNotExist:
        raise InvalidTokenError("Invalid or expired reset token")

    if reset_token.purpose != TokenPurpose.PASSWORD_RESET:
        raise InvalidTokenError("Invalid reset token")

    if reset_token.is_used:
        raise TokenAlreadyUsedError(
            "This reset link has already been used. Please request a new one."
        )

    if reset_token.is_expired:
        reset_token.delete()
        raise InvalidTokenError("Reset token has expired. Please request a new password reset.")

    if not User.objects.filter(email=reset_token.email).exists():
        reset_token.delete()
        raise InvalidTokenError("User account no longer exists")

    return _consume_reset_token(token_id=reset_token.id, new_password=new_password)


@transaction.atomic
def _consume_reset_token(*, token_id, new_password: str) -> User:
    # Re-read under lock so a racing request cannot use the token twice
    reset_token = (
        VerificationToken.objects
        .select_for_update()
        .get(id=token_id)
    )
    if reset_token.is_used:
        raise TokenAlreadyUsedError(
            "This reset link has already been used. Please request a new one."
        )

    user = (
        User.objects
        .select_for_update()
        .get(email=reset_token.email)
    )
    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])

    reset_token.used_at = timezone.now()
    reset_token.save(update_fields=['used_at'])

    logger.info("Password reset for user %s", user.id)
    return user
