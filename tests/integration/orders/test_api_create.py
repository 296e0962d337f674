"""Integration tests for Order creation endpoint.

Covers:
- Success 201: DRAFT order with items and display fields.
- Validation 400: serializer errors and accumulated reference failures.
- Tenant rules: client defaults to own tenant, 403 for foreign tenant.
"""

from __future__ import annotations

import pytest

from modules.catalog.validators import CARRIER_NOT_FOUND, MATERIALS_NOT_FOUND
from modules.orders.constants import CUSTOMER_REQUIRED, DUPLICATE_MATERIALS, OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


class TestCreateOrderSuccess:
    def test_admin_creates_order(self, admin_client, order_payload, customer, warehouse):
        response = admin_client.post(URL, order_payload, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == OrderStatus.DRAFT
        assert data["status_name"] == "Draft"
        assert data["order_number"].startswith("ORD-")
        assert data["lookup_code"] == data["order_number"]
        assert data["customer"] == {"id": customer.id, "lookup_code": "ACME", "name": "Acme Corporation"}
        assert data["warehouse"]["lookup_code"] == warehouse.lookup_code
        assert data["expected_delivery_date"] == "2030-01-15"
        assert data["version"] == 1
        assert [(i["material"]["code"], i["quantity"]) for i in data["items"]] == [
            ("MAT-A", 2),
            ("MAT-B", 3),
        ]

    def test_client_order_defaults_to_own_tenant(self, tenant_client, order_payload, customer):
        order_payload.pop("customer_id")
        response = tenant_client.post(URL, order_payload, format="json")
        assert response.status_code == 201
        assert response.json()["customer_id"] == customer.id

    def test_iso_datetime_delivery_date_accepted(self, admin_client, order_payload):
        order_payload["expected_delivery_date"] = "2030-01-15T08:00:00Z"
        response = admin_client.post(URL, order_payload, format="json")
        assert response.status_code == 201
        assert response.json()["expected_delivery_date"] == "2030-01-15"


class TestCreateOrderValidation:
    def test_empty_items_rejected(self, admin_client, order_payload):
        order_payload["items"] = []
        response = admin_client.post(URL, order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"
        assert Order.objects.count() == 0

    def test_zero_quantity_rejected(self, admin_client, order_payload):
        order_payload["items"][0]["quantity"] = 0
        response = admin_client.post(URL, order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["details"][0].startswith("items[0].quantity:")

    def test_missing_field_rejected(self, admin_client, order_payload):
        order_payload.pop("carrier_id")
        response = admin_client.post(URL, order_payload, format="json")
        assert response.status_code == 400
        assert "carrier_id: This field is required." in response.json()["details"]

    def test_admin_without_customer_rejected(self, admin_client, order_payload):
        order_payload.pop("customer_id")
        response = admin_client.post(URL, order_payload, format="json")
        assert response.status_code == 400
        assert response.json()["details"] == [CUSTOMER_REQUIRED]

    def test_reference_failures_listed_together(self, admin_client, order_payload, material_a):
        order_payload["carrier_id"] = 999_999
        order_payload["items"] = [
            {"material_id": 999_999, "quantity": 1},
            {"material_id": 999_999, "quantity": 1},
        ]
        response = admin_client.post(URL, order_payload, format="json")

        assert response.status_code == 400
        assert response.json() == {
            "error": "Validation failed",
            "details": [CARRIER_NOT_FOUND, MATERIALS_NOT_FOUND, DUPLICATE_MATERIALS],
        }
        assert Order.objects.count() == 0


class TestCreateOrderTenancy:
    def test_client_cannot_order_for_other_tenant(
        self, other_tenant_client, order_payload
    ):
        response = other_tenant_client.post(URL, order_payload, format="json")
        assert response.status_code == 403
        assert Order.objects.count() == 0

    def test_unauthenticated_rejected(self, api_client, order_payload):
        response = api_client.post(URL, order_payload, format="json")
        assert response.status_code == 401
