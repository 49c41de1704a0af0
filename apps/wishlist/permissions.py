from django.conf import settings
from rest_framework import permissions

from apps.accounts.models import UserStatus
from apps.accounts.permissions import Capability, has_capability
from .services import has_wishlist_access


class IsWishlistAdmin(permissions.BasePermission):
    """
    Permission: wish list management.

    Granted to users with the MANAGE_WISHLIST capability, to active users
    listed in WISHLIST_ADMIN_USER_IDS, and to holders of a valid access
    cookie obtained through the emailed code.
    """
    message = 'Forbidden'

    def has_permission(self, request, view):
        user = request.user
        if has_capability(user, Capability.MANAGE_WISHLIST):
            return True
        if (
            user and user.is_authenticated
            and user.status == UserStatus.ACTIVE
            and str(user.id) in settings.WISHLIST_ADMIN_USER_IDS
        ):
            return True
        return has_wishlist_access(request.COOKIES.get(settings.WISHLIST_ACCESS_COOKIE_NAME))
