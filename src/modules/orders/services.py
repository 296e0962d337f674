"""Order service layer (Use Cases).

Orchestrates the order lifecycle: creation, amendment and deletion of DRAFT
orders plus tenant-scoped reads.  All write operations are atomic: the
service defines the unit-of-work boundary.

Business rules enforced:
- Only DRAFT orders can be amended or deleted.
- CLIENT identities only reach their own tenant's orders; ADMIN reaches all.
- Every reference (order type, accounts, carrier, carrier service,
  warehouse, materials) must resolve before anything is written, and every
  failing check is reported at once.
- Ship-to / bill-to accounts must have a matching account type and belong
  to the order's customer; the carrier service must belong to the carrier.
- A material appears at most once per order.
- Amending items replaces the whole item set.
- A stale ``version`` is rejected (optimistic concurrency).
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import TYPE_CHECKING, List, Optional, Sequence

import structlog
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils.dateparse import parse_date, parse_datetime

from modules.catalog.validators import OrderReferences, ReferenceValidator
from modules.core.constants import RecordStatus
from modules.orders.constants import (
    CUSTOMER_REQUIRED,
    DUPLICATE_MATERIALS,
    INVALID_DELIVERY_DATE,
    NOT_DRAFT_DELETE,
    NOT_DRAFT_UPDATE,
    OrderStatus,
)
from modules.orders.events import OrderCreated, OrderDeleted, OrderUpdated
from modules.orders.exceptions import (
    OrderAccessDenied,
    OrderNotDraft,
    OrderNotFound,
    OrderNumberConflict,
    OrderValidationFailed,
    OrderVersionConflict,
    OrderWriteConflict,
)
from modules.orders.models import Order, OrderItem
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.core.identity import Identity
    from modules.orders.dtos import CreateOrderDTO, OrderItemDTO, UpdateOrderDTO
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

SCALAR_FIELDS = (
    "order_type_id",
    "ship_to_account_id",
    "bill_to_account_id",
    "carrier_id",
    "carrier_service_id",
    "warehouse_id",
)


def parse_delivery_date(value: Optional[str]) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` or a full ISO datetime; ``None`` if invalid."""
    if not value:
        return None
    try:
        parsed = parse_date(value)
        if parsed is not None:
            return parsed
        moment = parse_datetime(value)
    except ValueError:
        return None
    return moment.date() if moment is not None else None


def duplicate_material_errors(items: Sequence[OrderItemDTO]) -> List[str]:
    counts = Counter(item.material_id for item in items)
    return [DUPLICATE_MATERIALS] if any(n > 1 for n in counts.values()) else []


class OrderService:
    """Application service for Order use-cases.

    Receives its repository and the reference validator via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        validator: Optional[ReferenceValidator] = None,
    ) -> None:
        self._order_repo = order_repository
        self._validator = validator or ReferenceValidator()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO, identity: Identity) -> Order:
        """Create a DRAFT order with its items.

        Steps:
        1. Resolve the owning customer from the payload and the identity.
        2. Check every reference, duplicate materials and the delivery date,
           collecting all failures.
        3. Persist order + items atomically.

        Raises:
            OrderAccessDenied: a CLIENT targets another tenant.
            OrderValidationFailed: one or more checks failed (all listed).
            OrderNumberConflict: no unique order number could be stored.
            OrderWriteConflict: a referenced row vanished during the write.
        """
        customer_id = self._resolve_customer(dto.customer_id, identity)
        log = logger.bind(customer_id=customer_id, user_id=identity.user_id)
        log.info("order.creation_started", item_count=len(dto.items))

        errors = self._validator.check(
            OrderReferences(
                customer_id=customer_id,
                order_type_id=dto.order_type_id,
                ship_to_account_id=dto.ship_to_account_id,
                bill_to_account_id=dto.bill_to_account_id,
                carrier_id=dto.carrier_id,
                carrier_service_id=dto.carrier_service_id,
                warehouse_id=dto.warehouse_id,
                material_ids=dto.material_ids,
                owner_id=customer_id,
                service_carrier_id=dto.carrier_id,
            )
        )
        errors += duplicate_material_errors(dto.items)
        delivery_date = parse_delivery_date(dto.expected_delivery_date)
        if delivery_date is None:
            errors.append(INVALID_DELIVERY_DATE)
        if errors:
            log.warning("order.validation_failed", errors=errors)
            raise OrderValidationFailed(details=errors)

        order = Order(
            status=OrderStatus.DRAFT,
            customer_id=customer_id,
            order_type_id=dto.order_type_id,
            ship_to_account_id=dto.ship_to_account_id,
            bill_to_account_id=dto.bill_to_account_id,
            carrier_id=dto.carrier_id,
            carrier_service_id=dto.carrier_service_id,
            warehouse_id=dto.warehouse_id,
            expected_delivery_date=delivery_date,
        )
        order.stamp(identity.user_id)

        try:
            with transaction.atomic():
                order = self._order_repo.create(
                    order, self._build_items(dto.items, identity)
                )
        except IntegrityError as exc:
            log.warning("order.integrity_error", error=str(exc))
            if order.order_number and self._order_repo.order_number_taken(order.order_number):
                raise OrderNumberConflict() from exc
            raise OrderWriteConflict() from exc

        order.add_domain_event(OrderCreated(aggregate_id=order.id, customer_id=customer_id))
        self._publish(order)

        log.info("order.created", order_id=order.id, order_number=order.order_number)
        return self._reload(order.id)

    @transaction.atomic
    def update_order(self, order_id: int, dto: UpdateOrderDTO, identity: Identity) -> Order:
        """Amend a DRAFT order.

        Precondition chain: exists (404), DRAFT (400), tenant (403),
        version (409), then every supplied reference, material and date
        (400, accumulated).  Scalars are applied only when supplied;
        ``items`` replaces the whole item set.

        Raises:
            OrderNotFound, OrderNotDraft, OrderAccessDenied,
            OrderVersionConflict, OrderValidationFailed.
        """
        log = logger.bind(order_id=order_id, user_id=identity.user_id)
        order = self._locked_draft(order_id, identity, NOT_DRAFT_UPDATE)

        if dto.version is not None and dto.version != order.version:
            log.warning(
                "order.version_conflict", expected=dto.version, actual=order.version
            )
            raise OrderVersionConflict()

        carrier_changed = dto.supplied("carrier_id")
        service_changed = dto.supplied("carrier_service_id")
        errors = self._validator.check(
            OrderReferences(
                order_type_id=dto.order_type_id if dto.supplied("order_type_id") else None,
                ship_to_account_id=(
                    dto.ship_to_account_id if dto.supplied("ship_to_account_id") else None
                ),
                bill_to_account_id=(
                    dto.bill_to_account_id if dto.supplied("bill_to_account_id") else None
                ),
                carrier_id=dto.carrier_id if carrier_changed else None,
                carrier_service_id=(
                    dto.carrier_service_id
                    if service_changed
                    else order.carrier_service_id if carrier_changed else None
                ),
                warehouse_id=dto.warehouse_id if dto.supplied("warehouse_id") else None,
                material_ids=dto.material_ids,
                owner_id=order.customer_id,
                service_carrier_id=dto.carrier_id if carrier_changed else order.carrier_id,
            )
        )
        if dto.items is not None:
            errors += duplicate_material_errors(dto.items)

        delivery_date = None
        if dto.supplied("expected_delivery_date"):
            delivery_date = parse_delivery_date(dto.expected_delivery_date)
            if delivery_date is None:
                errors.append(INVALID_DELIVERY_DATE)

        if errors:
            log.warning("order.validation_failed", errors=errors)
            raise OrderValidationFailed(details=errors)

        for field in SCALAR_FIELDS:
            if dto.supplied(field):
                setattr(order, field, getattr(dto, field))
        if delivery_date is not None:
            order.expected_delivery_date = delivery_date
        order.version += 1
        order.stamp(identity.user_id)

        items = self._build_items(dto.items, identity) if dto.items is not None else None
        self._order_repo.update(order, items)

        order.add_domain_event(
            OrderUpdated(aggregate_id=order.id, customer_id=order.customer_id)
        )
        self._publish(order)

        log.info(
            "order.updated",
            version=order.version,
            items_replaced=items is not None,
        )
        return self._reload(order.id)

    @transaction.atomic
    def delete_order(self, order_id: int, identity: Identity) -> None:
        """Delete a DRAFT order and its items.

        Raises:
            OrderNotFound, OrderNotDraft, OrderAccessDenied.
        """
        order = self._locked_draft(order_id, identity, NOT_DRAFT_DELETE)
        customer_id = order.customer_id

        self._order_repo.delete(order.id)

        order.add_domain_event(OrderDeleted(aggregate_id=order_id, customer_id=customer_id))
        self._publish(order)
        logger.info("order.deleted", order_id=order_id, user_id=identity.user_id)

    def ensure_updatable(self, order_id: int, identity: Identity) -> None:
        """Run the 404, DRAFT and tenant checks without touching the payload.

        Views call this before parsing an amendment so that a malformed body
        never outranks these outcomes.  The mutation repeats the checks on
        the locked row.
        """
        self._check_mutable(
            self._order_repo.get_by_id(order_id), order_id, identity, NOT_DRAFT_UPDATE
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self, identity: Identity) -> QuerySet[Order]:
        """Orders visible to ``identity``: its tenant's, or all for ADMIN."""
        return self._order_repo.list(customer_id=identity.scope())

    def get_order(self, order_id: int, identity: Identity) -> Order:
        """Retrieve a single order.

        Raises:
            OrderNotFound: the order does not exist.
            OrderAccessDenied: the order belongs to another tenant.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound()
        if not identity.can_access(order.customer_id):
            logger.warning(
                "order.access_denied", order_id=order_id, user_id=identity.user_id
            )
            raise OrderAccessDenied()
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_customer(customer_id: Optional[int], identity: Identity) -> int:
        if identity.is_admin:
            if customer_id is None:
                raise OrderValidationFailed(details=[CUSTOMER_REQUIRED])
            return customer_id
        if customer_id is None:
            return identity.tenant_id
        if not identity.can_access(customer_id):
            logger.warning(
                "order.access_denied",
                customer_id=customer_id,
                user_id=identity.user_id,
            )
            raise OrderAccessDenied()
        return customer_id

    def _locked_draft(self, order_id: int, identity: Identity, not_draft_message: str) -> Order:
        return self._check_mutable(
            self._order_repo.get_for_update(order_id), order_id, identity, not_draft_message
        )

    @staticmethod
    def _check_mutable(
        order: Optional[Order], order_id: int, identity: Identity, not_draft_message: str
    ) -> Order:
        if not order:
            logger.warning("order.not_found", order_id=order_id)
            raise OrderNotFound()
        if not order.is_editable:
            logger.warning("order.not_draft", order_id=order_id, status=order.status)
            raise OrderNotDraft(not_draft_message)
        if not identity.can_access(order.customer_id):
            logger.warning(
                "order.access_denied", order_id=order_id, user_id=identity.user_id
            )
            raise OrderAccessDenied()
        return order

    @staticmethod
    def _build_items(items: Sequence[OrderItemDTO], identity: Identity) -> List[OrderItem]:
        return [
            OrderItem(
                material_id=item.material_id,
                quantity=item.quantity,
                status=RecordStatus.ACTIVE,
                created_by=identity.user_id,
                modified_by=identity.user_id,
            )
            for item in items
        ]

    @staticmethod
    def _publish(order: Order) -> None:
        event_bus.publish_on_commit(order.domain_events)
        order.clear_domain_events()

    def _reload(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound()
        return order
