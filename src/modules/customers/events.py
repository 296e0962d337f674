"""Customer domain events."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class CustomerCreated(DomainEvent):
    pass


@dataclass(frozen=True)
class CustomerUpdated(DomainEvent):
    pass


@dataclass(frozen=True)
class CustomerDeleted(DomainEvent):
    pass
