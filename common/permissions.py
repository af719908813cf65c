"""
Role based permissions shared by the payment, ticket and payout apps.

Roles live on ``UserProfile.role``.  Staff and superusers are always
treated as admins.
"""
from rest_framework.permissions import BasePermission


def is_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if user.is_staff or user.is_superuser:
        return True
    profile = getattr(user, "profile", None)
    return getattr(profile, "role", None) == "admin"


def is_organizer(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    profile = getattr(user, "profile", None)
    return getattr(profile, "role", None) == "organizer"


class IsPlatformAdmin(BasePermission):
    """Only platform administrators."""

    message = "Admin access required."

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsOrganizer(BasePermission):
    """Organizers (event owners collecting earnings)."""

    message = "Organizer access required."

    def has_permission(self, request, view):
        return is_organizer(request.user)

