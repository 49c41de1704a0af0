"""Email verification service."""

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import TokenPurpose, VerificationToken

from .exceptions import InvalidTokenError, TokenAlreadyUsedError

User = get_user_model()


def verify_user_email(*, token: str) -> User:
    """
    Consume an email verification token.

    Args:
        token: Token from the verification link

    Returns:
        The verified User

    Raises:
        InvalidTokenError: Unknown, expired or orphaned token
        TokenAlreadyUsedError: Token was consumed before
    """
    if not token:
        raise InvalidTokenError("Verification token is required")

    try:
        verification = VerificationToken.objects.get(
            token=token,
            purpose=TokenPurpose.VERIFY_EMAIL,
        )
    except VerificationToken.DoesNotExist:
        raise InvalidTokenError("Invalid verification token")

    if verification.is_used:
        raise TokenAlreadyUsedError("This verification link has already been used")

    if verification.is_expired:
        verification.delete()
        raise InvalidTokenError(
            "Verification token has expired. Please request a new verification email."
        )

    if not User.objects.filter(email=verification.email).exists():
        verification.delete()
        raise InvalidTokenError("User account no longer exists. Please register again.")

    return _consume_verification(verification_id=verification.id)


@transaction.atomic
def _consume_verification(*, verification_id) -> User:
    verification = (
        VerificationToken.objects
        .select_for_update()
        .get(id=verification_id)
    )
    if verification.is_used:
        raise TokenAlreadyUsedError("This verification link has already been used")

    try:
        user = (
            User.objects
            .select_for_update()
            .get(email=verification.email)
        )
    except User.DoesNotExist:
        raise InvalidTokenError("User account no longer exists. Please register again.")

    now = timezone.now()
    if user.email_verified_at is None:
        user.email_verified_at = now
        user.save(update_fields=['email_verified_at', 'updated_at'])

    verification.used_at = now
    verification.save(update_fields=['used_at'])

    return user
