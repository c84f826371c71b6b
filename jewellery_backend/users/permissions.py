# users/permissions.py

from rest_framework.permissions import BasePermission


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    """
    Base permission to check user role safely.
    Superusers always pass.
    """

    allowed_roles = set()

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if getattr(user, "is_superuser", False):
            return True
        return getattr(user, "role", None) in self.allowed_roles


# ---------------- ROLE PERMISSIONS ----------------
class IsAdmin(HasRole):
    allowed_roles = {"admin"}


class IsStaffOrAdmin(HasRole):
    """Back-office staff: order fulfilment, invoices."""

    allowed_roles = {"admin", "staff"}


BACK_OFFICE_ROLES = {"admin", "staff"}


def is_back_office(user) -> bool:
    if not (user and user.is_authenticated):
        return False
    return bool(getattr(user, "is_superuser", False)) or getattr(user, "role", None) in BACK_OFFICE_ROLES
