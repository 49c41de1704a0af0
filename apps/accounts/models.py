from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone
import uuid


def normalize_email_address(email):
    """Trim whitespace and lowercase the whole address."""
    return (email or '').strip().lower()


class Role(models.TextChoices):
    ADMIN = 'ADMIN', 'Admin'
    CAMPUS_PASTOR = 'CAMPUS_PASTOR', 'Campus Pastor'
    LEADER = 'LEADER', 'Leader'


class UserStatus(models.TextChoices):
    PENDING_APPROVAL = 'PENDING_APPROVAL', 'Pending Approval'
    ACTIVE = 'ACTIVE', 'Active'
    SUSPENDED = 'SUSPENDED', 'Suspended'


class Campus(models.TextChoices):
    DMV = 'DMV', 'CCI DMV'
    CCI_VIRTUAL = 'CCI_VIRTUAL', 'CCI-USA Virtual'
    DALLAS = 'DALLAS', 'CCI Dallas'
    BOSTON = 'BOSTON', 'CCI Boston'
    AUSTIN = 'AUSTIN', 'CCI Austin'
    CCI_USA_NASHVILLE = 'CCI_USA_NASHVILLE', 'CCI-USA Nashville'
    CCI_USA_OKLAHOMA = 'CCI_USA_OKLAHOMA', 'CCI-USA Oklahoma'
    CCI_USA_NEWYORK_NEWJERSEY = 'CCI_USA_NEWYORK_NEWJERSEY', 'CCI-USA New York/New Jersey'
    CCI_USA_KNOXVILLE = 'CCI_USA_KNOXVILLE', 'CCI-USA Knoxville'
    CCI_USA_NORTH_CAROLINA = 'CCI_USA_NORTH_CAROLINA', 'CCI-USA North Carolina'
    CCI_USA_ATLANTA = 'CCI_USA_ATLANTA', 'CCI-USA Atlanta'
    CCI_USA_BAY_AREA = 'CCI_USA_BAY_AREA', 'CCI-USA Bay Area'
    CCI_USA_CHICAGO = 'CCI_USA_CHICAGO', 'CCI-USA Chicago'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = normalize_email_address(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', Role.ADMIN)
        extra_fields.setdefault('status', UserStatus.ACTIVE)
        extra_fields.setdefault('email_verified_at', timezone.now())

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Church staff member or volunteer leader."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    name = models.CharField(max_length=150, blank=True)

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.LEADER)
    status = models.CharField(
        max_length=20,
        choices=UserStatus.choices,
        default=UserStatus.PENDING_APPROVAL
    )
    campus = models.CharField(max_length=40, choices=Campus.choices, blank=True, null=True)

    # Payment details
    zelle = models.CharField(max_length=255, blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True)

    email_verified_at = models.DateTimeField(null=True, blank=True)

    # Django admin access
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['status', 'created_at']),
            models.Index(fields=['role', 'status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return name or email."""
        return self.name or self.email

    @property
    def has_password(self):
        return self.has_usable_password()

    @property
    def is_email_verified(self):
        return self.email_verified_at is not None


class Session(models.Model):
    """Login session identified by the HTTP-only session cookie."""

    id = models.CharField(primary_key=True, max_length=64, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sessions')
    expires_at = models.DateTimeField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'user_sessions'
        indexes = [
            models.Index(fields=['user', 'expires_at']),
        ]

    def __str__(self):
        return f"Session for {self.user_id} until {self.expires_at:%Y-%m-%d %H:%M}"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()


class TokenPurpose(models.TextChoices):
    VERIFY_EMAIL = 'verify_email', 'Verify Email'
    PASSWORD_RESET = 'PASSWORD_RESET', 'Password Reset'


class VerificationToken(models.Model):
    """Single-use, purpose-scoped token sent by email."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=255, db_index=True)
    token = models.CharField(max_length=128, unique=True)
    purpose = models.CharField(max_length=20, choices=TokenPurpose.choices)
    expires_at = models.DateTimeField()
    used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'verification_tokens'
        indexes = [
            models.Index(fields=['email', 'purpose']),
        ]

    def __str__(self):
        return f"{self.purpose} token for {self.email}"

    @property
    def is_expired(self):
        return self.expires_at < timezone.now()

    @property
    def is_used(self):
        return self.used_at is not None

    def get_user(self):
        return User.objects.filter(email=self.email).first()
