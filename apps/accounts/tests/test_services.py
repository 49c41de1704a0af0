import pytest
from datetime import timedelta
from unittest.mock import patch
from django.utils import timezone

from apps.accounts.models import User, Role, UserStatus, Session, TokenPurpose, VerificationToken
from apps.accounts.permissions import Capability, has_capability
from apps.accounts.services import (
    register_user,
    authenticate_user,
    create_session,
    get_active_session,
    verify_user_email,
    reset_password,
    suspend_user,
    UserRegistrationError,
    RegistrationEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenAlreadyUsedError,
)
from apps.notifications.exceptions import NotificationError


@pytest.mark.django_db
class TestRegisterUser:

    def test_email_is_normalized(self):
        user = register_user(email='  Mixed.Case@Example.COM ', name=' Mixed Case ')

        assert user.email == 'mixed.case@example.com'
        assert user.name == 'Mixed Case'

    def test_duplicate_email_case_insensitive(self, leader_user):
        with pytest.raises(UserRegistrationError):
            register_user(email='Leader@Example.com', name='Again')

    @patch('apps.accounts.services.user_registration.send_email_or_raise')
    def test_email_failure_rolls_back(self, mock_send):
        mock_send.side_effect = NotificationError('smtp down')

        with pytest.raises(RegistrationEmailError):
            register_user(email='rollback@example.com', name='Rollback')

        assert not User.objects.filter(email='rollback@example.com').exists()


@pytest.mark.django_db
class TestAuthenticateUser:

    def test_unknown_email(self):
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email='nobody@example.com', password='whatever123')

    def test_valid_credentials(self, leader_user):
        user = authenticate_user(email=' leader@example.com ', password='LeaderPass123!')

        assert user == leader_user


@pytest.mark.django_db
class TestSessions:

    def test_create_session_uses_random_id(self, leader_user):
        first = create_session(user=leader_user)
        second = create_session(user=leader_user)

        assert first.id != second.id
        assert len(first.id) == 64
        assert first.expires_at > timezone.now()

    def test_expired_session_is_deleted_on_lookup(self, leader_user):
        session = create_session(user=leader_user)
        Session.objects.filter(id=session.id).update(expires_at=timezone.now() - timedelta(minutes=1))

        assert get_active_session(session_id=session.id) is None
        assert not Session.objects.filter(id=session.id).exists()

    def test_suspension_ends_sessions(self, leader_user, admin_user):
        create_session(user=leader_user)

        suspend_user(user_id=leader_user.id, suspended_by=admin_user)

        assert not Session.objects.filter(user=leader_user).exists()


@pytest.mark.django_db
class TestTokens:

    def test_verify_keeps_existing_verification_time(self, leader_user):
        verified_at = leader_user.email_verified_at
        VerificationToken.objects.create(
            email=leader_user.email,
            token='again-token',
            purpose=TokenPurpose.VERIFY_EMAIL,
            expires_at=timezone.now() + timedelta(hours=1),
        )

        user = verify_user_email(token='again-token')

        assert user.email_verified_at == verified_at

    def test_orphaned_verification_token_removed(self):
        VerificationToken.objects.create(
            email='gone@example.com',
            token='orphan-token',
            purpose=TokenPurpose.VERIFY_EMAIL,
            expires_at=timezone.now() + timedelta(hours=1),
        )

        with pytest.raises(InvalidTokenError):
            verify_user_email(token='orphan-token')

        assert not VerificationToken.objects.filter(token='orphan-token').exists()

    def test_reset_token_cannot_be_reused(self, leader_user, reset_token):
        reset_password(token=reset_token.token, new_password='FirstReset123!')

        with pytest.raises(TokenAlreadyUsedError):
            reset_password(token=reset_token.token, new_password='SecondReset123!')

        leader_user.refresh_from_db()
        assert leader_user.check_password('FirstReset123!')

    def test_expired_reset_token_deleted(self, reset_token):
        reset_token.expires_at = timezone.now() - timedelta(seconds=1)
        reset_token.save()

        with pytest.raises(InvalidTokenError):
            reset_password(token=reset_token.token, new_password='Whatever123!')

        assert not VerificationToken.objects.filter(id=reset_token.id).exists()


@pytest.mark.django_db
class TestCapabilities:

    def test_admin_has_all_admin_capabilities(self, admin_user):
        assert has_capability(admin_user, Capability.APPROVE_EXPENSES)
        assert has_capability(admin_user, Capability.MANAGE_WISHLIST)
        assert not has_capability(admin_user, Capability.ADD_PASTOR_REMARKS)

    def test_pastor_capabilities(self, pastor_user):
        assert has_capability(pastor_user, Capability.VIEW_ALL_EXPENSES)
        assert has_capability(pastor_user, Capability.ADD_PASTOR_REMARKS)
        assert not has_capability(pastor_user, Capability.MARK_AS_PAID)

    def test_leader_has_none(self, leader_user):
        assert not any(has_capability(leader_user, capability) for capability in Capability)

    def test_inactive_admin_has_none(self, admin_user):
        admin_user.status = UserStatus.SUSPENDED

        assert not has_capability(admin_user, Capability.MANAGE_USERS)

    def test_role_values(self):
        assert set(Role.values) == {'ADMIN', 'CAMPUS_PASTOR', 'LEADER'}
