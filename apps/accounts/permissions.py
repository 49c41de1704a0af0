"""
Role based authorization.

Every capability maps to the set of roles that hold it. Code asks
has_capability() instead of comparing role strings.
"""

import enum

from rest_framework import permissions

from .models import Role, UserStatus


class Capability(enum.Enum):
    APPROVE_EXPENSES = 'approve_expenses'
    MANAGE_USERS = 'manage_users'
    MARK_AS_PAID = 'mark_as_paid'
    UPDATE_EXPENSE_ITEMS = 'update_expense_items'
    MANAGE_EXPENSES = 'manage_expenses'
    MANAGE_REPORTS = 'manage_reports'
    MANAGE_WISHLIST = 'manage_wishlist'
    VIEW_ALL_EXPENSES = 'view_all_expenses'
    MANAGE_TEAMS = 'manage_teams'
    EXPORT_DATA = 'export_data'
    ADD_PASTOR_REMARKS = 'add_pastor_remarks'


CAPABILITY_ROLES = {
    Capability.APPROVE_EXPENSES: (Role.ADMIN,),
    Capability.MANAGE_USERS: (Role.ADMIN,),
    Capability.MARK_AS_PAID: (Role.ADMIN,),
    Capability.UPDATE_EXPENSE_ITEMS: (Role.ADMIN,),
    Capability.MANAGE_EXPENSES: (Role.ADMIN,),
    Capability.MANAGE_REPORTS: (Role.ADMIN,),
    Capability.MANAGE_WISHLIST: (Role.ADMIN,),
    Capability.VIEW_ALL_EXPENSES: (Role.ADMIN, Role.CAMPUS_PASTOR),
    Capability.MANAGE_TEAMS: (Role.ADMIN, Role.CAMPUS_PASTOR),
    Capability.EXPORT_DATA: (Role.ADMIN, Role.CAMPUS_PASTOR),
    Capability.ADD_PASTOR_REMARKS: (Role.CAMPUS_PASTOR,),
}


def has_capability(user, capability: Capability) -> bool:
    """Return True if an active user's role grants the capability."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return False
    if user.status != UserStatus.ACTIVE:
        return False
    return user.role in CAPABILITY_ROLES[capability]


class IsActiveUser(permissions.BasePermission):
    """
    Permission: User must be logged in with an ACTIVE account.
    """
    message = 'Authentication required'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.status == UserStatus.ACTIVE)


def require_capability(capability: Capability, message=None):
    """Build a permission class that checks a single capability."""

    class HasCapability(IsActiveUser):

        def has_permission(self, request, view):
            return super().has_permission(request, view) and has_capability(request.user, capability)

    HasCapability.message = message or 'Insufficient permissions'
    HasCapability.__name__ = f'Has{capability.name.title().replace("_", "")}'
    return HasCapability
