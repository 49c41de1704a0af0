"""
Emailed one-time codes granting temporary wish list admin access.

The pending code (as a salted hash) and the granted access each travel in
a signed cookie. Only the count of wrong guesses per issued code is kept
server side, in the cache.
"""

from datetime import timedelta
from typing import Optional
import logging
import secrets

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.core import signing
from django.core.cache import cache
from django.utils import timezone

from apps.notifications.mailer import send_email_or_raise
from apps.notifications.templates import wishlist_access_code_email

from .exceptions import (
    AccessCodeError,
    EmailNotAllowedError,
    NoPendingCodeError,
    AccessCodeExpiredError,
    InvalidAccessCodeError,
    TooManyCodeAttemptsError,
)

logger = logging.getLogger(__name__)

CODE_SALT = 'wishlist.access-code'
ACCESS_SALT = 'wishlist.access'


def normalize_email(email: Optional[str]) -> str:
    return (email or '').strip().lower()


def is_email_allowed(email: str) -> bool:
    allowed = {normalize_email(entry) for entry in settings.WISHLIST_ALLOWED_EMAILS}
    allowed.discard('')
    return normalize_email(email) in allowed


def _load(token, salt):
    if not token:
        return None
    try:
        return signing.loads(token, salt=salt)
    except signing.BadSignature:
        return None


def _attempts_key(payload):
    # the salted hash is unique per issued code
    return f"wishlist-code-attempts:{payload['code_hash']}"


def issue_access_code(*, email: str, now=None) -> str:
    """
    Email a 6-digit code to an allow-listed address.

    Returns:
        Signed token holding the email, the code's salted hash and its expiry

    Raises:
        EmailNotAllowedError: If the email is not allow-listed
        NotificationError: If the code email could not be sent
    """
    email = normalize_email(email)
    if not is_email_allowed(email):
        raise EmailNotAllowedError("Email not allowed")

    now = now or timezone.now()
    ttl_minutes = settings.WISHLIST_CODE_TTL_MINUTES
    code = str(secrets.randbelow(900000) + 100000)

    token = signing.dumps(
        {
            'email': email,
            'code_hash': make_password(code),
            'expires_at': (now + timedelta(minutes=ttl_minutes)).timestamp(),
        },
        salt=CODE_SALT,
    )

    send_email_or_raise(wishlist_access_code_email(code=code, ttl_minutes=ttl_minutes), email)

    logger.info("Wish list access code issued to %s", email)
    return token


def verify_access_code(*, email: str, code: Optional[str], code_token: Optional[str], now=None) -> str:
    """
    Exchange a valid code for an access grant.

    Args:
        email: Address the code was sent to
        code: Code typed by the user
        code_token: Token returned by issue_access_code

    Returns:
        Signed access token valid for WISHLIST_ACCESS_TTL_HOURS

    Raises:
        EmailNotAllowedError: If the email is not allow-listed
        AccessCodeError: If no code was given
        NoPendingCodeError: If no code was issued for this email
        AccessCodeExpiredError: If the code is past its expiry
        InvalidAccessCodeError: If the code does not match
        TooManyCodeAttemptsError: If the code was guessed wrong too many times
    """
    email = normalize_email(email)
    code = (code or '').strip()

    if not is_email_allowed(email):
        raise EmailNotAllowedError("Email not allowed")
    if not code:
        raise AccessCodeError("Code is required")

    payload = _load(code_token, CODE_SALT)
    if not payload or payload.get('email') != email:
        raise NoPendingCodeError("No valid code. Please request a new one.")

    now = now or timezone.now()
    if payload['expires_at'] < now.timestamp():
        raise AccessCodeExpiredError("Code expired. Please request a new one.")

    attempts_key = _attempts_key(payload)
    if cache.get(attempts_key, 0) >= settings.WISHLIST_CODE_MAX_ATTEMPTS:
        raise TooManyCodeAttemptsError("Too many attempts. Please request a new code.")

    if not check_password(code, payload['code_hash']):
        cache.add(attempts_key, 0, timeout=settings.WISHLIST_CODE_TTL_MINUTES * 60)
        cache.incr(attempts_key)
        logger.warning("Invalid wish list access code for %s", email)
        raise InvalidAccessCodeError("Invalid code")

    cache.delete(attempts_key)

    logger.info("Wish list access granted to %s", email)
    return signing.dumps(
        {
            'email': email,
            'expires_at': (now + timedelta(hours=settings.WISHLIST_ACCESS_TTL_HOURS)).timestamp(),
        },
        salt=ACCESS_SALT,
    )


def has_wishlist_access(access_token: Optional[str], now=None) -> bool:
    """True for an unexpired access token issued to a still allow-listed email."""
    payload = _load(access_token, ACCESS_SALT)
    if not payload:
        return False
    if not is_email_allowed(payload.get('email')):
        return False
    now = now or timezone.now()
    return payload.get('expires_at', 0) >= now.timestamp()
