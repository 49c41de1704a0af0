"""User registration service."""

from datetime import timedelta
from typing import Optional
import logging
import secrets

from django.conf import settings
from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import (
    Role,
    UserStatus,
    TokenPurpose,
    VerificationToken,
    normalize_email_address,
)
from apps.notifications.exceptions import NotificationError
from apps.notifications.mailer import send_email_or_raise
from apps.notifications.templates import verification_email

from .exceptions import UserRegistrationError, RegistrationEmailError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    name: str,
    campus: Optional[str] = None,
    password: Optional[str] = None,
    role: str = Role.LEADER,
    zelle: Optional[str] = None,
) -> User:
    """
    Register a new user pending administrator approval.

    The verification email is sent inside the transaction so that a
    delivery failure also discards the new account.

    Args:
        email: Email address (trimmed and lowercased)
        name: Full name
        campus: Home campus
        password: Optional password; may instead be set after verification
        role: Requested role
        zelle: Optional Zelle email or phone

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
        RegistrationEmailError: If the verification email cannot be sent
    """
    email = normalize_email_address(email)

    if User.objects.filter(email=email).exists():
        raise UserRegistrationError("An account with this email already exists")

    user = User.objects.create_user(
        email=email,
        password=password,
        name=name.strip(),
        campus=campus or None,
        role=role,
        zelle=zelle or None,
        status=UserStatus.PENDING_APPROVAL,
    )

    token = VerificationToken.objects.create(
        email=email,
        token=secrets.token_hex(32),
        purpose=TokenPurpose.VERIFY_EMAIL,
        expires_at=timezone.now() + timedelta(hours=settings.EMAIL_VERIFICATION_TTL_HOURS),
    )

    try:
        send_email_or_raise(
            verification_email(name=user.get_display_name(), token=token.token),
            email,
        )
    except NotificationError as e:
        raise RegistrationEmailError("Failed to send verification email") from e

    logger.info("Registered user %s pending approval", user.id)
    return user
