"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Look-ups follow the Null Object pattern (``None`` for a missing or
malformed id).  Writes expect to run inside the service's
``transaction.atomic()`` block; item replacement goes through
``replace_children``, which refuses to run outside one.

Concurrency control on mutations uses ``select_for_update()`` plus the
``version`` column checked by the service.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import structlog
from django.db.models import Count, Prefetch, QuerySet, Sum
from django.db.models.functions import Coalesce

from modules.core.repositories.children import replace_children
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

DISPLAY_RELATIONS = (
    "order_type",
    "customer",
    "ship_to_account",
    "bill_to_account",
    "carrier",
    "carrier_service",
    "warehouse",
)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, id: int) -> Optional[Order]:
        try:
            return (
                Order.objects.select_related(*DISPLAY_RELATIONS)
                .prefetch_related(
                    Prefetch(
                        "items",
                        queryset=OrderItem.objects.select_related("material").order_by("id"),
                    )
                )
                .filter(id=id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        customer_id: Optional[int] = None,
    ) -> QuerySet[Order]:
        """List orders annotated with ``item_count`` and ``total_quantity``."""
        queryset = Order.objects.select_related("customer").annotate(
            item_count=Count("items"),
            total_quantity=Coalesce(Sum("items__quantity"), 0),
        )
        if customer_id is not None:
            queryset = queryset.filter(customer_id=customer_id)
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def order_number_taken(self, order_number: str) -> bool:
        return Order.objects.filter(order_number=order_number).exists()

    def create(self, order: Order, items: Sequence[OrderItem]) -> Order:
        order.save()
        replace_children(OrderItem, "order", order.id, items)
        logger.info(
            "order.saved",
            order_id=order.id,
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    def update(self, order: Order, items: Optional[Sequence[OrderItem]] = None) -> Order:
        order.save()
        if items is not None:
            replace_children(OrderItem, "order", order.id, items)
        logger.info(
            "order.saved",
            order_id=order.id,
            version=order.version,
            items_replaced=items is not None,
        )
        return order

    def delete(self, id: int) -> bool:
        """Hard-delete an order and its items.  ``False`` if absent."""
        order = self.get_for_update(id)
        if not order:
            return False
        OrderItem.objects.filter(order_id=id).delete()
        order.delete()
        logger.info("order.deleted", order_id=id)
        return True
