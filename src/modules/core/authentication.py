"""Stateless JWT authentication yielding a tenant-aware identity.

Token issuance lives outside this service.  Incoming Bearer tokens are
verified by SimpleJWT (signature, expiry, token type) and turned into a
``TenantTokenUser`` without a database round-trip: the claims themselves are
the identity.

Required claims
---------------
* ``user_id``: the acting user (``SIMPLE_JWT["USER_ID_CLAIM"]``).
* ``role``: ``ADMIN`` or ``CLIENT``.
* ``customer_id``: the tenant; required for ``CLIENT``, ignored for ``ADMIN``.
* ``status``: optional record status; anything but ACTIVE is refused.

Security decisions
------------------
* **Fail Closed**: an unknown or missing role is a 401, never a default.
* A client token without a tenant is rejected: it could never own anything.
"""

from __future__ import annotations

from functools import cached_property
from typing import Optional

import structlog
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework_simplejwt.authentication import JWTStatelessUserAuthentication
from rest_framework_simplejwt.models import TokenUser

from modules.core.constants import RecordStatus, Role

logger = structlog.get_logger(__name__)


class TenantTokenUser(TokenUser):
    """Request user built from verified token claims.

    Views read ``request.user.role`` / ``.customer_id`` and hand them to the
    service layer as a ``modules.core.identity.Identity``.
    """

    @cached_property
    def role(self) -> str:
        return str(self.token.get("role", ""))

    @cached_property
    def customer_id(self) -> Optional[int]:
        value = self.token.get("customer_id")
        return int(value) if value is not None else None

    @cached_property
    def status(self) -> int:
        return int(self.token.get("status", RecordStatus.ACTIVE))

    @property
    def is_staff(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self) -> str:
        return f"{self.role}:{self.id}"


class TenantJWTAuthentication(JWTStatelessUserAuthentication):
    """DRF authentication class validating role and tenant claims."""

    def get_user(self, validated_token) -> TenantTokenUser:
        user = super().get_user(validated_token)

        if user.role not in Role.values:
            logger.warning("jwt_invalid_role", role=user.role)
            raise AuthenticationFailed("Token has no valid role claim.")

        if user.role == Role.CLIENT and user.customer_id is None:
            logger.warning("jwt_missing_tenant", user_id=str(user.id))
            raise AuthenticationFailed("Client token has no customer claim.")

        if user.status != RecordStatus.ACTIVE:
            logger.warning("jwt_inactive_user", user_id=str(user.id))
            raise PermissionDenied("User account is not active.")

        logger.info("jwt_authenticated", user_id=str(user.id), role=user.role)
        return user
