"""Customer domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses through ``modules.core.api``.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, NotFound, ValidationFailed


class CustomerNotFound(NotFound):
    default_message = "Customer not found"


class CustomerValidationFailed(ValidationFailed):
    """One or more aggregate rules failed; ``details`` lists every message."""


class CustomerAlreadyExists(Conflict):
    """A lookup code or e-mail in the payload is already used elsewhere."""

    default_message = "Customer data conflicts with existing records"


class CustomerVersionConflict(Conflict):
    default_message = "Customer was modified by another request"


class CustomerInUse(Conflict):
    """Orders or accounts still reference the customer."""

    default_message = "Customer is referenced by orders or accounts"
