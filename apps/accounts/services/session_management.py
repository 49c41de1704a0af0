"""Login session service."""

from datetime import timedelta
from typing import Optional
import secrets

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Session, User


@transaction.atomic
def create_session(
    *,
    user: User,
    ip_address: Optional[str] = None,
    user_agent: str = ""
) -> Session:
    """
    Open a new login session for the user.

    Args:
        user: Authenticated user
        ip_address: Client address, stored for auditing
        user_agent: Client user agent, stored for auditing

    Returns:
        Created Session instance
    """
    return Session.objects.create(
        id=secrets.token_hex(32),
        user=user,
        expires_at=timezone.now() + timedelta(hours=settings.AUTH_SESSION_TTL_HOURS),
        ip_address=ip_address,
        user_agent=user_agent[:500],
    )


def get_active_session(*, session_id: str) -> Optional[Session]:
    """Return the unexpired session for the id, deleting it if it has expired."""
    try:
        session = Session.objects.select_related('user').get(id=session_id)
    except Session.DoesNotExist:
        return None

    if session.is_expired:
        session.delete()
        return None

    return session


def delete_session(*, session_id: str) -> None:
    Session.objects.filter(id=session_id).delete()
