"""
User administration service.

Approval, denial, suspension and role/status changes performed by
administrators. Changes that would not alter anything are reported back
instead of written.
"""

from typing import Optional, Tuple
from uuid import UUID
import logging

from django.db import transaction
from django.db.models import QuerySet
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import Role, UserStatus

from .exceptions import UserNotFoundError, InvalidUserStateError

User = get_user_model()

logger = logging.getLogger(__name__)


def _get_user_for_update(user_id: UUID) -> User:
    try:
        return User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError("User not found")


def list_users(*, status: Optional[str] = None) -> QuerySet:
    """Return users newest first, optionally filtered by status."""
    queryset = User.objects.all().order_by('-created_at')
    if status:
        queryset = queryset.filter(status=status)
    return queryset


@transaction.atomic
def approve_user(*, user_id: UUID, approved_by: User) -> Tuple[User, str]:
    """
    Activate a pending or suspended user.

    Approving a pending user stamps email_verified_at; reactivating a
    suspended user leaves it untouched.

    Returns:
        (user, action) where action is 'approved' or 'reactivated'

    Raises:
        UserNotFoundError: If the user does not exist
        InvalidUserStateError: If the user is already active
    """
    user = _get_user_for_update(user_id)

    if user.status not in (UserStatus.PENDING_APPROVAL, UserStatus.SUSPENDED):
        raise InvalidUserStateError("User is not pending approval or suspended")

    update_fields = ['status', 'updated_at']
    if user.status == UserStatus.PENDING_APPROVAL:
        action = 'approved'
        user.email_verified_at = timezone.now()
        update_fields.append('email_verified_at')
    else:
        action = 'reactivated'

    user.status = UserStatus.ACTIVE
    user.save(update_fields=update_fields)

    logger.info("User %s %s by %s", user.id, action, approved_by.id)
    return user, action


@transaction.atomic
def deny_user(*, user_id: UUID, denied_by: User) -> None:
    """
    Deny a pending registration by deleting the account.

    Raises:
        UserNotFoundError: If the user does not exist
        InvalidUserStateError: If the user is not pending approval
    """
    user = _get_user_for_update(user_id)

    if user.status != UserStatus.PENDING_APPROVAL:
        raise InvalidUserStateError("User is not pending approval")

    logger.info("Registration of %s denied by %s", user.email, denied_by.id)
    user.delete()


@transaction.atomic
def suspend_user(*, user_id: UUID, suspended_by: User) -> User:
    """
    Suspend a user.

    Raises:
        UserNotFoundError: If the user does not exist
        InvalidUserStateError: If an admin tries to suspend themselves
    """
    user = _get_user_for_update(user_id)

    if user.id == suspended_by.id:
        raise InvalidUserStateError("You cannot suspend your own account")

    user.status = UserStatus.SUSPENDED
    user.save(update_fields=['status', 'updated_at'])
    # Open sessions end with the suspension
    user.sessions.all().delete()
    return user


@transaction.atomic
def update_user_role(*, user_id: UUID, role: str) -> Tuple[User, bool]:
    """
    Change a user's role.

    Returns:
        (user, changed) where changed is False if the role was already set

    Raises:
        UserNotFoundError: If the user does not exist
        ValueError: If role is invalid
    """
    if role not in Role.values:
        raise ValueError(f"Invalid role. Must be one of: {Role.values}")

    user = _get_user_for_update(user_id)

    if user.role == role:
        return user, False

    user.role = role
    user.save(update_fields=['role', 'updated_at'])
    return user, True


@transaction.atomic
def update_user_status(*, user_id: UUID, status: str) -> Tuple[User, bool]:
    """
    Change a user's status directly.

    Moving a pending user to ACTIVE also marks the email verified.

    Returns:
        (user, changed) where changed is False if the status was already set

    Raises:
        UserNotFoundError: If the user does not exist
        ValueError: If status is invalid
    """
    if status not in UserStatus.values:
        raise ValueError(f"Invalid status. Must be one of: {UserStatus.values}")

    user = _get_user_for_update(user_id)

    if user.status == status:
        return user, False

    update_fields = ['status', 'updated_at']
    if status == UserStatus.ACTIVE and user.status == UserStatus.PENDING_APPROVAL:
        user.email_verified_at = timezone.now()
        update_fields.append('email_verified_at')

    user.status = status
    user.save(update_fields=update_fields)
    return user, True


@transaction.atomic
def update_profile(*, user: User, zelle: Optional[str]) -> User:
    """Update the payment details on the user's own profile."""
    user.zelle = zelle or None
    user.save(update_fields=['zelle', 'updated_at'])
    return user
