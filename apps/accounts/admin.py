from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils import timezone
from django.utils.html import format_html

from .models import User, UserStatus, Session, VerificationToken


STATUS_COLORS = {
    UserStatus.ACTIVE: '#6B8E5E',
    UserStatus.PENDING_APPROVAL: '#E5A03A',
    UserStatus.SUSPENDED: '#B85C5C',
}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for church users.

    Mirrors the approval workflow of the users API:
    - filtering by role, status and campus
    - bulk approve / suspend actions
    """

    list_display = [
        'email',
        'name',
        'role',
        'status_badge',
        'campus',
        'email_verified_at',
        'created_at',
    ]

    list_filter = ['role', 'status', 'campus', 'is_staff']

    search_fields = ['email', 'name']

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'name', 'password')
        }),
        ('Church', {
            'fields': ('role', 'status', 'campus', 'zelle', 'phone'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('email_verified_at', 'created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'campus', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login']

    filter_horizontal = ['groups', 'user_permissions']

    def status_badge(self, obj):
        """Display account status as colored badge."""
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#ccc'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    actions = ['approve_users', 'suspend_users']

    @admin.action(description='Approve / reactivate selected users')
    def approve_users(self, request, queryset):
        pending = queryset.filter(status=UserStatus.PENDING_APPROVAL)
        approved = pending.update(status=UserStatus.ACTIVE, email_verified_at=timezone.now())
        reactivated = queryset.filter(status=UserStatus.SUSPENDED).update(status=UserStatus.ACTIVE)
        self.message_user(request, f'Approved {approved} and reactivated {reactivated} user(s).')

    @admin.action(description='Suspend selected users')
    def suspend_users(self, request, queryset):
        # Never suspend the acting admin
        count = queryset.exclude(id=request.user.id).update(status=UserStatus.SUSPENDED)
        self.message_user(request, f'Suspended {count} user(s).')


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ['user', 'ip_address', 'created_at', 'expires_at']
    search_fields = ['user__email', 'ip_address']
    readonly_fields = ['id', 'user', 'ip_address', 'user_agent', 'created_at', 'expires_at']


@admin.register(VerificationToken)
class VerificationTokenAdmin(admin.ModelAdmin):
    list_display = ['email', 'purpose', 'expires_at', 'used_at', 'created_at']
    list_filter = ['purpose']
    search_fields = ['email']
    exclude = ['token']
