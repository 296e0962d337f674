"""Integration tests for order deletion."""

from __future__ import annotations

import pytest

from modules.orders.constants import NOT_DRAFT_DELETE, OrderStatus
from modules.orders.models import Order, OrderItem

pytestmark = pytest.mark.integration


class TestDeleteOrder:
    def test_draft_order_deleted_with_items(self, tenant_client, make_order):
        order = make_order()
        response = tenant_client.delete(f"/api/v1/orders/{order.id}/")

        assert response.status_code == 204
        assert not Order.objects.filter(id=order.id).exists()
        assert not OrderItem.objects.filter(order_id=order.id).exists()

    def test_non_draft_rejected(self, admin_client, make_order):
        order = make_order(status=OrderStatus.PROCESSING)
        response = admin_client.delete(f"/api/v1/orders/{order.id}/")
        assert response.status_code == 400
        assert response.json() == {"error": NOT_DRAFT_DELETE}
        assert Order.objects.filter(id=order.id).exists()

    def test_other_tenant_forbidden(self, other_tenant_client, make_order):
        order = make_order()
        response = other_tenant_client.delete(f"/api/v1/orders/{order.id}/")
        assert response.status_code == 403
        assert Order.objects.filter(id=order.id).exists()

    def test_missing_order(self, admin_client):
        assert admin_client.delete("/api/v1/orders/999999/").status_code == 404

    def test_second_delete_is_404(self, admin_client, make_order):
        order = make_order()
        assert admin_client.delete(f"/api/v1/orders/{order.id}/").status_code == 204
        assert admin_client.delete(f"/api/v1/orders/{order.id}/").status_code == 404
