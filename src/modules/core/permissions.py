"""Role-based DRF permissions."""

from __future__ import annotations

from rest_framework.permissions import BasePermission

from modules.core.constants import Role


class IsAdminRole(BasePermission):
    """Grant access only to identities carrying the ``ADMIN`` role."""

    message = "Admin access required"

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "role", None) == Role.ADMIN
        )
