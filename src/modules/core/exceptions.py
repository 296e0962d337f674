"""Domain error taxonomy.

Raised by the Service Layer when a business rule or precondition fails.
The classes carry no HTTP knowledge; ``modules.core.api`` maps each family
onto a status code.

- ``ValidationFailed``: invalid payload, state-gate violation or dangling
  reference.  ``details`` lists one message per violated rule.
- ``AccessDenied``: the identity may not touch the target aggregate.
- ``NotFound``: the aggregate root does not exist.
- ``Conflict``: uniqueness violation or concurrent modification.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class DomainError(Exception):
    """Base class for every business-rule failure."""

    default_message = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Iterable[str]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.details: List[str] = list(details or [])
        super().__init__(self.message)


class ValidationFailed(DomainError):
    default_message = "Validation failed"


class AccessDenied(DomainError):
    default_message = "Access denied"


class NotFound(DomainError):
    default_message = "Not found"


class Conflict(DomainError):
    default_message = "Conflict"
