import re

from rest_framework import serializers

from .models import User, Role, UserStatus, Campus, normalize_email_address


class UserSerializer(serializers.ModelSerializer):
    """User profile as returned by the API."""

    has_password = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'status',
            'campus',
            'zelle',
            'email_verified_at',
            'has_password',
            'created_at',
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Minimal user info embedded in expenses, notes and reports."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role']
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for user registration."""

    email = serializers.EmailField(max_length=255)
    name = serializers.CharField(max_length=150)
    campus = serializers.ChoiceField(choices=Campus.choices, required=False, allow_null=True)
    role = serializers.ChoiceField(choices=Role.choices, required=False, default=Role.LEADER)
    password = serializers.CharField(
        write_only=True,
        required=False,
        min_length=8,
        style={'input_type': 'password'}
    )
    zelle = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate_email(self, value):
        return normalize_email_address(value)


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class SetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, style={'input_type': 'password'})


class PasswordResetRequestSerializer(serializers.Serializer):
    """Serializer for password reset request."""

    email = serializers.EmailField(required=True)


class PasswordResetConfirmSerializer(serializers.Serializer):
    """Serializer for password reset confirmation."""

    token = serializers.CharField(required=True)
    password = serializers.CharField(
        required=True,
        min_length=8,
        style={'input_type': 'password'}
    )


EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_PATTERN = re.compile(r'^\+?[1-9]\d{0,15}$')


class ProfileUpdateSerializer(serializers.Serializer):
    zelle = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate_zelle(self, value):
        """Zelle can be either an email address or a phone number."""
        if not value:
            return None
        value = value.strip()
        digits = re.sub(r'\D', '', value)
        if EMAIL_PATTERN.match(value) or PHONE_PATTERN.match(digits):
            return value
        raise serializers.ValidationError(
            'Zelle information must be a valid email address or phone number'
        )


class UserIdSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class UpdateUserRoleSerializer(UserIdSerializer):
    role = serializers.ChoiceField(choices=Role.choices)


class UpdateUserStatusSerializer(UserIdSerializer):
    status = serializers.ChoiceField(choices=UserStatus.choices)
