"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``OrderItemDTO``: one requested line (material + quantity).
- ``CreateOrderDTO``: input for order creation.
- ``UpdateOrderDTO``: partial amendment; ``model_fields_set`` tells which
  fields were supplied, so an explicit ``warehouse_id=None`` clears the
  warehouse while an absent one leaves it untouched.

``expected_delivery_date`` stays a string here: the service parses it so a
bad date is reported together with every other failing check.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class OrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    material_id: int
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be greater than zero")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    ``customer_id`` may be omitted by a CLIENT identity, in which case the
    order is placed for the requester's own tenant.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: Optional[int] = None
    order_type_id: int
    ship_to_account_id: int
    bill_to_account_id: int
    carrier_id: int
    carrier_service_id: int
    warehouse_id: Optional[int] = None
    expected_delivery_date: str
    items: List[OrderItemDTO]

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: List[OrderItemDTO]) -> List[OrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item")
        return v

    @property
    def material_ids(self) -> List[int]:
        return [item.material_id for item in self.items]


class UpdateOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_type_id: Optional[int] = None
    ship_to_account_id: Optional[int] = None
    bill_to_account_id: Optional[int] = None
    carrier_id: Optional[int] = None
    carrier_service_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    expected_delivery_date: Optional[str] = None
    items: Optional[List[OrderItemDTO]] = None
    version: Optional[int] = None

    def supplied(self, field: str) -> bool:
        return field in self.model_fields_set and (
            field == "warehouse_id" or getattr(self, field) is not None
        )

    @property
    def material_ids(self) -> Optional[List[int]]:
        if self.items is None:
            return None
        return [item.material_id for item in self.items]
