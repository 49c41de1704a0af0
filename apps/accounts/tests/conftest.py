import pytest
from datetime import timedelta
from django.utils import timezone

from apps.accounts.models import User, Role, UserStatus, TokenPurpose, VerificationToken


@pytest.fixture
def pending_user(db):
    """Create and return a user awaiting approval."""
    return User.objects.create_user(
        email='pending@example.com',
        password='PendingPass123!',
        name='Pending User',
        role=Role.LEADER,
        status=UserStatus.PENDING_APPROVAL,
    )


@pytest.fixture
def suspended_user(db):
    """Create and return a suspended user."""
    return User.objects.create_user(
        email='suspended@example.com',
        password='SuspendedPass123!',
        name='Suspended User',
        role=Role.LEADER,
        status=UserStatus.SUSPENDED,
        email_verified_at=timezone.now() - timedelta(days=30),
    )


@pytest.fixture
def unverified_user(db):
    """Create and return a freshly registered user without a password."""
    return User.objects.create_user(
        email='unverified@example.com',
        name='Unverified User',
        status=UserStatus.PENDING_APPROVAL,
    )


@pytest.fixture
def verification_token(unverified_user):
    return VerificationToken.objects.create(
        email=unverified_user.email,
        token='verify-token-123',
        purpose=TokenPurpose.VERIFY_EMAIL,
        expires_at=timezone.now() + timedelta(hours=24),
    )


@pytest.fixture
def reset_token(leader_user):
    return VerificationToken.objects.create(
        email=leader_user.email,
        token='reset-token-123',
        purpose=TokenPurpose.PASSWORD_RESET,
        expires_at=timezone.now() + timedelta(hours=1),
    )
