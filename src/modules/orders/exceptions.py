"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses through ``modules.core.api``.
"""

from __future__ import annotations

from modules.core.exceptions import AccessDenied, Conflict, NotFound, ValidationFailed


class OrderNotFound(NotFound):
    default_message = "Order not found"


class OrderNotDraft(ValidationFailed):
    """The order has left DRAFT and can no longer be amended or deleted."""


class OrderValidationFailed(ValidationFailed):
    """Payload or reference checks failed; ``details`` lists every message."""


class OrderAccessDenied(AccessDenied):
    """The order belongs to another tenant."""


class OrderVersionConflict(Conflict):
    default_message = "Order was modified by another request"


class OrderNumberConflict(Conflict):
    default_message = "Could not allocate a unique order number"


class OrderWriteConflict(Conflict):
    """A referenced row changed between validation and the write."""

    default_message = "Order references changed while saving; retry the request"
