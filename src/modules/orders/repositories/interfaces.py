"""Order repository interface.

Extends ``IRepository[Order]`` with the aggregate writes the lifecycle
engine needs: creation with items, scalar update with wholesale item
replacement, and row-locked reads for mutation.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem children.  Mutations must run
    inside the caller's transaction.
    """

    @abstractmethod
    def get_by_id(self, id: int) -> Optional[Order]:
        """Retrieve an order with every display relation loaded."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row lock (``SELECT ... FOR UPDATE``)."""

    @abstractmethod
    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        customer_id: Optional[int] = None,
    ) -> "models.QuerySet[Order]":
        """List orders, restricted to ``customer_id`` when given."""

    @abstractmethod
    def order_number_taken(self, order_number: str) -> bool:
        """Whether a stored order already uses ``order_number``."""

    @abstractmethod
    def create(self, order: Order, items: Sequence[OrderItem]) -> Order:
        """Insert the order and its items."""

    @abstractmethod
    def update(self, order: Order, items: Optional[Sequence[OrderItem]] = None) -> Order:
        """Save scalar changes; replace every item when ``items`` is given."""
