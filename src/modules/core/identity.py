"""Identity context shared by the service layer.

The HTTP layer resolves ``request.user`` (a token user, see
``modules.core.authentication``) into an immutable ``Identity``.  Services
only ever see this object, never the request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from modules.core.constants import Role


@dataclass(frozen=True)
class Identity:
    """Verified requester: who they are, their role, and their tenant."""

    user_id: int
    role: str
    tenant_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_access(self, customer_id: Optional[int]) -> bool:
        """Admins reach every tenant; clients only their own."""
        if self.is_admin:
            return True
        return self.tenant_id is not None and self.tenant_id == customer_id

    def scope(self) -> Optional[int]:
        """Tenant id to filter reads by, or ``None`` for unscoped (admin) reads."""
        return None if self.is_admin else self.tenant_id

    @classmethod
    def from_user(cls, user: Any) -> Identity:
        customer_id = getattr(user, "customer_id", None)
        return cls(
            user_id=int(user.id),
            role=str(getattr(user, "role", Role.CLIENT)),
            tenant_id=int(customer_id) if customer_id is not None else None,
        )
