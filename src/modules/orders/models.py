"""Order and OrderItem models.

Business rules implemented:
- Order number auto-generated as human-readable identifier
  (``ORD-YYYYMMDD-XXXXXX``), retried on collision; ``lookup_code`` mirrors it.
- Orders start in DRAFT; only DRAFT orders are mutable (service layer).
- Reference FKs use PROTECT so catalog rows and customers with orders
  cannot disappear underneath them.
- OrderItem quantity is positive (DB check constraint).
- Items are owned by the order: CASCADE on delete, replaced wholesale on
  update.
"""

from __future__ import annotations

import secrets
from typing import Any

import structlog
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.constants import RecordStatus
from modules.core.models import AuditedModel, VersionedModel
from modules.orders.constants import (
    EDITABLE_STATUSES,
    ORDER_NUMBER_MAX_RETRIES,
    OrderStatus,
)
from modules.orders.exceptions import OrderNumberConflict
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, VersionedModel):
    """Order aggregate root.

    ``order_number`` is a human-readable identifier auto-generated on first
    save.  The integer ``id`` is used for internal references and API
    lookups.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    lookup_code = models.CharField(max_length=20, unique=True, editable=False)
    status = models.PositiveSmallIntegerField(
        choices=OrderStatus.choices,
        default=OrderStatus.DRAFT,
    )
    order_type = models.ForeignKey(
        "catalog.OrderType", on_delete=models.PROTECT, related_name="orders"
    )
    customer = models.ForeignKey(
        "customers.Customer", on_delete=models.PROTECT, related_name="orders"
    )
    ship_to_account = models.ForeignKey(
        "catalog.Account", on_delete=models.PROTECT, related_name="shipped_orders"
    )
    bill_to_account = models.ForeignKey(
        "catalog.Account", on_delete=models.PROTECT, related_name="billed_orders"
    )
    carrier = models.ForeignKey(
        "catalog.Carrier", on_delete=models.PROTECT, related_name="orders"
    )
    carrier_service = models.ForeignKey(
        "catalog.CarrierService", on_delete=models.PROTECT, related_name="orders"
    )
    warehouse = models.ForeignKey(
        "catalog.Warehouse",
        on_delete=models.SET_NULL,
        related_name="orders",
        null=True,
        blank=True,
    )
    expected_delivery_date = models.DateField()

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["customer", "-created_at"], name="orders_customer_idx"),
        ]

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for attempt in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
                logger.warning("order.number_collision", attempt=attempt + 1)
            else:
                raise OrderNumberConflict()
        self.lookup_code = self.order_number
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.get_status_display()})"


class OrderItem(AuditedModel):
    """Line item linking an Order to a Material."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    material = models.ForeignKey(
        "catalog.Material",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.PositiveSmallIntegerField(
        choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.material_id} x{self.quantity}"
