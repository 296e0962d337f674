"""Integration tests for order list and detail endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


@pytest.fixture()
def foreign_order(make_order, other_customer, account_factory):
    account = account_factory(other_customer, "GLOBEX-SHIP")
    return make_order(customer=other_customer, ship_to_account=account, bill_to_account=account)


class TestOrderDetail:
    def test_owner_reads_order(self, tenant_client, make_order, material_a, material_b):
        order = make_order(items=[(material_a, 2), (material_b, 1)])
        response = tenant_client.get(f"{URL}{order.id}/")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == order.id
        assert data["carrier"]["name"] == "UPS"
        assert data["carrier_service"]["name"] == "Ground"
        assert data["ship_to_account"]["account_type"] == "SHIP_TO"
        assert len(data["items"]) == 2

    def test_other_tenant_gets_403(self, other_tenant_client, make_order):
        order = make_order()
        response = other_tenant_client.get(f"{URL}{order.id}/")
        assert response.status_code == 403

    def test_missing_order_gets_404(self, admin_client):
        response = admin_client.get(f"{URL}999999/")
        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}

    def test_non_numeric_id_is_not_routed(self, admin_client):
        assert admin_client.get(f"{URL}abc/").status_code == 404


class TestOrderList:
    def test_client_sees_only_own_orders(self, tenant_client, make_order, foreign_order):
        own = make_order()
        data = tenant_client.get(URL).json()
        assert [o["id"] for o in data["orders"]] == [own.id]
        assert data["pagination"]["total"] == 1

    def test_admin_sees_all_orders(self, admin_client, make_order, foreign_order):
        make_order()
        data = admin_client.get(URL).json()
        assert data["pagination"]["total"] == 2

    def test_list_row_shape(self, admin_client, make_order, material_a, material_b):
        make_order(items=[(material_a, 2), (material_b, 5)])
        row = admin_client.get(URL).json()["orders"][0]
        assert row["customer_name"] == "Acme Corporation"
        assert row["item_count"] == 2
        assert row["total_quantity"] == 7
        assert row["status_name"] == "Draft"

    def test_pagination(self, admin_client, make_order):
        for _ in range(5):
            make_order()
        data = admin_client.get(URL, {"page": 2, "limit": 2}).json()
        assert len(data["orders"]) == 2
        assert data["pagination"] == {"total": 5, "page": 2, "limit": 2, "total_pages": 3}

    def test_limit_capped(self, admin_client, make_order):
        make_order()
        data = admin_client.get(URL, {"limit": 1000}).json()
        assert data["pagination"]["limit"] == 100

    def test_filter_by_status(self, admin_client, make_order):
        make_order()
        submitted = make_order(status=OrderStatus.SUBMITTED)
        data = admin_client.get(URL, {"status": OrderStatus.SUBMITTED}).json()
        assert [o["id"] for o in data["orders"]] == [submitted.id]

    def test_filter_by_customer(self, admin_client, make_order, foreign_order, other_customer):
        make_order()
        data = admin_client.get(URL, {"customer": other_customer.id}).json()
        assert [o["id"] for o in data["orders"]] == [foreign_order.id]

    def test_filter_by_creation_date(self, admin_client, make_order):
        recent = make_order()
        old = make_order()
        Order.objects.filter(id=old.id).update(created_at=timezone.now() - timedelta(days=60))

        since = (timezone.now() - timedelta(days=7)).date().isoformat()
        data = admin_client.get(URL, {"from_date": since}).json()
        assert [o["id"] for o in data["orders"]] == [recent.id]

        until = (timezone.now() - timedelta(days=30)).date().isoformat()
        data = admin_client.get(URL, {"to_date": until}).json()
        assert [o["id"] for o in data["orders"]] == [old.id]

    def test_newest_first(self, admin_client, make_order):
        first = make_order()
        second = make_order()
        ids = [o["id"] for o in admin_client.get(URL).json()["orders"]]
        assert ids == [second.id, first.id]
