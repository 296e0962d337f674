"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderCreated, OrderDeleted, OrderUpdated
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=event.aggregate_id,
            customer_id=event.customer_id,
        )


class OrderUpdatedHandler(IEventHandler[OrderUpdated]):
    def handle(self, event: OrderUpdated) -> None:
        logger.info(
            "order.event.updated",
            order_id=event.aggregate_id,
            customer_id=event.customer_id,
        )


class OrderDeletedHandler(IEventHandler[OrderDeleted]):
    def handle(self, event: OrderDeleted) -> None:
        logger.info(
            "order.event.deleted",
            order_id=event.aggregate_id,
            customer_id=event.customer_id,
        )


order_created_handler = OrderCreatedHandler()
order_updated_handler = OrderUpdatedHandler()
order_deleted_handler = OrderDeletedHandler()
