import pytest
from django.conf import settings
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import User, Role, UserStatus, Campus
from apps.accounts.services import create_session


def login_client(client, user):
    """Attach a fresh session cookie for the user to the client."""
    session = create_session(user=user, ip_address='127.0.0.1', user_agent='pytest')
    client.cookies[settings.AUTH_SESSION_COOKIE_NAME] = session.id
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return an active administrator."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        name='Admin User',
        role=Role.ADMIN,
        status=UserStatus.ACTIVE,
        campus=Campus.DMV,
        email_verified_at=timezone.now(),
    )


@pytest.fixture
def second_admin(db):
    """Create and return another active administrator."""
    return User.objects.create_user(
        email='admin2@example.com',
        password='AdminPass123!',
        name='Second Admin',
        role=Role.ADMIN,
        status=UserStatus.ACTIVE,
        campus=Campus.DALLAS,
        email_verified_at=timezone.now(),
    )


@pytest.fixture
def pastor_user(db):
    """Create and return an active campus pastor at the DMV campus."""
    return User.objects.create_user(
        email='pastor@example.com',
        password='PastorPass123!',
        name='Pastor User',
        role=Role.CAMPUS_PASTOR,
        status=UserStatus.ACTIVE,
        campus=Campus.DMV,
        email_verified_at=timezone.now(),
    )


@pytest.fixture
def leader_user(db):
    """Create and return an active team leader."""
    return User.objects.create_user(
        email='leader@example.com',
        password='LeaderPass123!',
        name='Leader User',
        role=Role.LEADER,
        status=UserStatus.ACTIVE,
        campus=Campus.DMV,
        zelle='leader@example.com',
        email_verified_at=timezone.now(),
    )


@pytest.fixture
def other_leader(db):
    """Create and return a leader at another campus."""
    return User.objects.create_user(
        email='other-leader@example.com',
        password='LeaderPass123!',
        name='Other Leader',
        role=Role.LEADER,
        status=UserStatus.ACTIVE,
        campus=Campus.BOSTON,
        email_verified_at=timezone.now(),
    )


@pytest.fixture
def admin_client(admin_user):
    return login_client(APIClient(), admin_user)


@pytest.fixture
def pastor_client(pastor_user):
    return login_client(APIClient(), pastor_user)


@pytest.fixture
def leader_client(leader_user):
    return login_client(APIClient(), leader_user)


@pytest.fixture
def other_leader_client(other_leader):
    return login_client(APIClient(), other_leader)
