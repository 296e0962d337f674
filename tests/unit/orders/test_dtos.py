"""Unit tests for Order DTOs."""

import pytest
from pydantic import ValidationError

from modules.orders.dtos import CreateOrderDTO, OrderItemDTO, UpdateOrderDTO

pytestmark = pytest.mark.unit


def _create_payload(**overrides):
    payload = {
        "order_type_id": 1,
        "ship_to_account_id": 2,
        "bill_to_account_id": 3,
        "carrier_id": 4,
        "carrier_service_id": 5,
        "expected_delivery_date": "2030-01-15",
        "items": [{"material_id": 10, "quantity": 2}],
    }
    payload.update(overrides)
    return payload


class TestOrderItemDTO:
    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="Quantity must be greater than zero"):
            OrderItemDTO(material_id=1, quantity=0)

    def test_is_frozen(self):
        item = OrderItemDTO(material_id=1, quantity=1)
        with pytest.raises(ValidationError):
            item.quantity = 5


class TestCreateOrderDTO:
    def test_customer_and_warehouse_optional(self):
        dto = CreateOrderDTO(**_create_payload())
        assert dto.customer_id is None
        assert dto.warehouse_id is None
        assert dto.material_ids == [10]

    def test_items_required(self):
        with pytest.raises(ValidationError, match="at least one item"):
            CreateOrderDTO(**_create_payload(items=[]))


class TestUpdateOrderDTO:
    def test_absent_fields_not_supplied(self):
        dto = UpdateOrderDTO(carrier_id=4)
        assert dto.supplied("carrier_id")
        assert not dto.supplied("order_type_id")
        assert not dto.supplied("warehouse_id")
        assert dto.material_ids is None

    def test_explicit_null_warehouse_is_supplied(self):
        dto = UpdateOrderDTO(warehouse_id=None)
        assert dto.supplied("warehouse_id")

    def test_explicit_null_elsewhere_is_ignored(self):
        dto = UpdateOrderDTO(carrier_id=None)
        assert not dto.supplied("carrier_id")

    def test_empty_items_list_kept(self):
        dto = UpdateOrderDTO(items=[])
        assert dto.items == []
        assert dto.material_ids == []
