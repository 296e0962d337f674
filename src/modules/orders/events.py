"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""


@dataclass(frozen=True)
class OrderUpdated(DomainEvent):
    """Raised when a draft order is amended."""


@dataclass(frozen=True)
class OrderDeleted(DomainEvent):
    """Raised when a draft order is deleted."""
