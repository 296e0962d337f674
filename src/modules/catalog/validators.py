"""Reference Validator.

Read-only existence checks for the entities an order or customer aggregate
points at.  ``check`` never stops at the first failure: it returns one
message per broken reference so the caller can report them all in a single
400 response.  Nothing here writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, Iterable, List, Optional, Sequence, Type

import structlog
from django.db import models

from modules.catalog.models import (
    Account,
    Carrier,
    CarrierService,
    Material,
    OrderType,
    Warehouse,
)
from modules.customers.models import Customer

logger = structlog.get_logger(__name__)


class EntityKind(StrEnum):
    CUSTOMER = "customer"
    ORDER_TYPE = "order_type"
    ACCOUNT = "account"
    CARRIER = "carrier"
    CARRIER_SERVICE = "carrier_service"
    WAREHOUSE = "warehouse"
    MATERIAL = "material"


MODELS: Dict[EntityKind, Type[models.Model]] = {
    EntityKind.CUSTOMER: Customer,
    EntityKind.ORDER_TYPE: OrderType,
    EntityKind.ACCOUNT: Account,
    EntityKind.CARRIER: Carrier,
    EntityKind.CARRIER_SERVICE: CarrierService,
    EntityKind.WAREHOUSE: Warehouse,
    EntityKind.MATERIAL: Material,
}

CUSTOMER_NOT_FOUND = "Customer not found"
ORDER_TYPE_NOT_FOUND = "Order type not found"
SHIP_TO_NOT_FOUND = "Ship to account not found"
BILL_TO_NOT_FOUND = "Bill to account not found"
CARRIER_NOT_FOUND = "Carrier not found"
CARRIER_SERVICE_NOT_FOUND = "Carrier service not found"
WAREHOUSE_NOT_FOUND = "Warehouse not found"
MATERIALS_NOT_FOUND = "One or more materials not found"
WAREHOUSES_NOT_FOUND = "One or more warehouses not found"

SHIP_TO_WRONG_TYPE = "Ship to account is not a shipping address"
BILL_TO_WRONG_TYPE = "Bill to account is not a billing address"
SHIP_TO_WRONG_CUSTOMER = "Ship to account does not belong to the customer"
BILL_TO_WRONG_CUSTOMER = "Bill to account does not belong to the customer"
SERVICE_WRONG_CARRIER = "Carrier service does not belong to the carrier"


@dataclass(frozen=True)
class OrderReferences:
    """References carried by an order payload.  ``None`` means "not supplied".

    ``owner_id`` and ``service_carrier_id`` are context for the cross-entity
    rules (accounts belong to the order's customer, the service belongs to the
    order's carrier) and are not existence-checked themselves.
    """

    customer_id: Optional[int] = None
    order_type_id: Optional[int] = None
    ship_to_account_id: Optional[int] = None
    bill_to_account_id: Optional[int] = None
    carrier_id: Optional[int] = None
    carrier_service_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    material_ids: Optional[Sequence[int]] = None
    owner_id: Optional[int] = None
    service_carrier_id: Optional[int] = None


class ReferenceValidator:
    """Existence checks against the reference tables."""

    def exists(self, kind: EntityKind, id: Optional[int]) -> bool:
        if id is None:
            return False
        return MODELS[EntityKind(kind)].objects.filter(pk=id).exists()

    def missing_ids(self, kind: EntityKind, ids: Iterable[int]) -> List[int]:
        """Return the ids among *ids* with no row, sorted and de-duplicated."""
        wanted = set(ids)
        if not wanted:
            return []
        found = set(
            MODELS[EntityKind(kind)]
            .objects.filter(pk__in=wanted)
            .values_list("pk", flat=True)
        )
        return sorted(wanted - found)

    def check(self, refs: OrderReferences) -> List[str]:
        """Check every supplied reference and return all failure messages."""
        errors: List[str] = []
        owner_id = refs.owner_id
        service_carrier_id = refs.service_carrier_id

        if refs.customer_id is not None and not self.exists(
            EntityKind.CUSTOMER, refs.customer_id
        ):
            errors.append(CUSTOMER_NOT_FOUND)
            # ownership cannot be judged against a customer that is not there
            if owner_id == refs.customer_id:
                owner_id = None

        if refs.order_type_id is not None and not self.exists(
            EntityKind.ORDER_TYPE, refs.order_type_id
        ):
            errors.append(ORDER_TYPE_NOT_FOUND)

        errors.extend(
            self._check_account(refs.ship_to_account_id, owner_id, shipping=True)
        )
        errors.extend(
            self._check_account(refs.bill_to_account_id, owner_id, shipping=False)
        )

        if refs.carrier_id is not None and not self.exists(
            EntityKind.CARRIER, refs.carrier_id
        ):
            errors.append(CARRIER_NOT_FOUND)
            if service_carrier_id == refs.carrier_id:
                service_carrier_id = None

        if refs.carrier_service_id is not None:
            service = CarrierService.objects.filter(pk=refs.carrier_service_id).first()
            if service is None:
                errors.append(CARRIER_SERVICE_NOT_FOUND)
            elif (
                service_carrier_id is not None
                and service.carrier_id != service_carrier_id
            ):
                errors.append(SERVICE_WRONG_CARRIER)

        if refs.warehouse_id is not None and not self.exists(
            EntityKind.WAREHOUSE, refs.warehouse_id
        ):
            errors.append(WAREHOUSE_NOT_FOUND)

        if refs.material_ids is not None and self.missing_ids(
            EntityKind.MATERIAL, refs.material_ids
        ):
            errors.append(MATERIALS_NOT_FOUND)

        if errors:
            logger.info("references.invalid", errors=errors)
        return errors

    def _check_account(
        self,
        account_id: Optional[int],
        owner_id: Optional[int],
        *,
        shipping: bool,
    ) -> List[str]:
        if account_id is None:
            return []

        account = Account.objects.filter(pk=account_id).first()
        if account is None:
            return [SHIP_TO_NOT_FOUND if shipping else BILL_TO_NOT_FOUND]

        errors = []
        if shipping and not account.can_ship_to():
            errors.append(SHIP_TO_WRONG_TYPE)
        if not shipping and not account.can_bill_to():
            errors.append(BILL_TO_WRONG_TYPE)
        if owner_id is not None and account.customer_id != owner_id:
            errors.append(SHIP_TO_WRONG_CUSTOMER if shipping else BILL_TO_WRONG_CUSTOMER)
        return errors
