"""Unit tests for OrderStatsService and WarehouseStatsService."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from modules.core.constants import RecordStatus
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.stats.cache import invalidate
from modules.stats.services import (
    OrderStatsQuery,
    OrderStatsService,
    WarehouseStatsQuery,
    WarehouseStatsService,
    percentage,
)

pytestmark = pytest.mark.unit

NOW = datetime(2030, 6, 15, 12, 0, tzinfo=timezone.utc)


def _backdate(order, days):
    Order.objects.filter(id=order.id).update(created_at=NOW - timedelta(days=days))


@pytest.fixture()
def foreign_order_factory(make_order, other_customer, account_factory):
    account = account_factory(other_customer, "GLOBEX-SHIP")

    def _make(**kwargs):
        return make_order(
            customer=other_customer,
            ship_to_account=account,
            bill_to_account=account,
            **kwargs,
        )

    return _make


class TestPercentage:
    def test_one_decimal_string(self):
        assert percentage(1, 3) == "33.3"
        assert percentage(2, 2) == "100.0"

    def test_zero_total(self):
        assert percentage(0, 0) == "0.0"


# ===========================================================================
# Order stats
# ===========================================================================


class TestOrderStats:
    def test_empty(self):
        stats = OrderStatsService().compute(OrderStatsQuery(), now=NOW)
        assert stats == {
            "period_months": 12,
            "total_orders": 0,
            "orders_by_status": [],
            "orders_by_month": [],
            "top_carriers": [],
            "top_materials": [],
        }

    def test_status_breakdown_with_percentages(self, make_order):
        for status in (OrderStatus.DRAFT, OrderStatus.DRAFT, OrderStatus.COMPLETED):
            _backdate(make_order(status=status), days=1)

        stats = OrderStatsService().compute(OrderStatsQuery(), now=NOW)

        assert stats["total_orders"] == 3
        assert stats["orders_by_status"] == [
            {"status": OrderStatus.DRAFT, "status_name": "Draft", "count": 2, "percentage": "66.7"},
            {"status": OrderStatus.COMPLETED, "status_name": "Completed", "count": 1, "percentage": "33.3"},
        ]

    def test_period_window(self, make_order):
        _backdate(make_order(), days=10)
        _backdate(make_order(), days=200)

        stats = OrderStatsService().compute(OrderStatsQuery(period_months=3), now=NOW)
        assert stats["total_orders"] == 1
        assert stats["period_months"] == 3

    def test_orders_by_month(self, make_order):
        _backdate(make_order(), days=1)
        _backdate(make_order(), days=3)
        _backdate(make_order(), days=40)

        stats = OrderStatsService().compute(OrderStatsQuery(), now=NOW)
        assert stats["orders_by_month"] == [
            {"month": "2030-05", "count": 1},
            {"month": "2030-06", "count": 2},
        ]

    def test_top_carriers_and_materials(
        self, make_order, material_a, material_b, other_carrier, other_carrier_service
    ):
        _backdate(make_order(items=[(material_a, 5), (material_b, 1)]), days=1)
        _backdate(make_order(items=[(material_a, 2)]), days=1)
        _backdate(
            make_order(
                items=[(material_b, 3)],
                carrier=other_carrier,
                carrier_service=other_carrier_service,
            ),
            days=1,
        )

        stats = OrderStatsService().compute(OrderStatsQuery(), now=NOW)

        assert [(c["carrier_name"], c["order_count"]) for c in stats["top_carriers"]] == [
            ("UPS", 2),
            ("FedEx", 1),
        ]
        assert stats["top_materials"] == [
            {"material_id": material_a.id, "material_code": "MAT-A", "order_count": 2, "total_quantity": 7},
            {"material_id": material_b.id, "material_code": "MAT-B", "order_count": 2, "total_quantity": 4},
        ]

    def test_tenant_scope(self, make_order, foreign_order_factory, customer):
        _backdate(make_order(), days=1)
        _backdate(foreign_order_factory(), days=1)

        service = OrderStatsService()
        assert service.compute(OrderStatsQuery(customer_id=customer.id), now=NOW)["total_orders"] == 1
        assert service.compute(OrderStatsQuery(), now=NOW)["total_orders"] == 2

    def test_get_stats_is_cached_until_invalidated(self, make_order):
        service = OrderStatsService()
        with freeze_time(NOW):
            make_order()
            assert service.get_stats(OrderStatsQuery())["total_orders"] == 1

            make_order()
            assert service.get_stats(OrderStatsQuery())["total_orders"] == 1

            invalidate(None)
            assert service.get_stats(OrderStatsQuery())["total_orders"] == 2


# ===========================================================================
# Warehouse stats
# ===========================================================================


class TestWarehouseStats:
    @pytest.fixture()
    def warehouses(self, warehouse_factory):
        return [
            warehouse_factory("WH-1", state="TX", capacity=1000),
            warehouse_factory("WH-2", state="TX", capacity=2000),
            warehouse_factory("WH-3", state="GA", capacity=3000),
            warehouse_factory("WH-OFF", state="GA", capacity=9000, status=RecordStatus.INACTIVE),
        ]

    def test_global_summary(self, warehouses):
        stats = WarehouseStatsService().compute(WarehouseStatsQuery(), now=NOW)
        summary = stats["summary"]

        assert summary["total_active_warehouses"] == 3
        assert summary["capacity"] == {"total": 6000, "average": 2000, "maximum": 3000, "minimum": 1000}
        assert summary["utilization"]["by_state"] == [
            {"state": "GA", "warehouse_count": 1, "total_capacity": 3000, "utilization_percentage": "33.3"},
            {"state": "TX", "warehouse_count": 2, "total_capacity": 3000, "utilization_percentage": "66.7"},
        ]
        assert summary["utilization"]["total_utilization"] == 2000
        assert stats["distributions"]["by_state"] == [
            {"state": "GA", "count": 1, "total_capacity": 3000},
            {"state": "TX", "count": 2, "total_capacity": 3000},
        ]
        assert "by_customer" not in stats["distributions"]

    def test_customer_distribution_only_when_requested(
        self, warehouses, assign_warehouse, customer, other_customer
    ):
        assign_warehouse(customer, warehouses[0])
        assign_warehouse(other_customer, warehouses[0])
        assign_warehouse(other_customer, warehouses[2])

        stats = WarehouseStatsService().compute(
            WarehouseStatsQuery(include_customer_distribution=True), now=NOW
        )
        assert stats["distributions"]["by_customer"] == [
            {"warehouse_id": warehouses[0].id, "customer_count": 2},
            {"warehouse_id": warehouses[2].id, "customer_count": 1},
        ]

    def test_tenant_sees_only_assigned_warehouses(self, warehouses, assign_warehouse, customer):
        assign_warehouse(customer, warehouses[1])
        assign_warehouse(customer, warehouses[2], status=RecordStatus.INACTIVE)

        stats = WarehouseStatsService().compute(
            WarehouseStatsQuery(customer_id=customer.id), now=NOW
        )
        assert stats["summary"]["total_active_warehouses"] == 1
        assert stats["summary"]["capacity"]["total"] == 2000

    def test_recent_orders_by_warehouse(
        self, make_order, foreign_order_factory, warehouse, assign_warehouse, customer
    ):
        assign_warehouse(customer, warehouse)
        _backdate(make_order(), days=2)
        _backdate(make_order(), days=45)
        _backdate(foreign_order_factory(), days=2)

        service = WarehouseStatsService()
        global_orders = service.compute(WarehouseStatsQuery(), now=NOW)["summary"]["orders"]
        tenant_orders = service.compute(
            WarehouseStatsQuery(customer_id=customer.id), now=NOW
        )["summary"]["orders"]

        assert global_orders == {
            "last_30_days": 2,
            "by_warehouse": [{"warehouse_id": warehouse.id, "order_count": 2}],
        }
        assert tenant_orders["last_30_days"] == 1

    def test_no_warehouses(self):
        summary = WarehouseStatsService().compute(WarehouseStatsQuery(), now=NOW)["summary"]
        assert summary["total_active_warehouses"] == 0
        assert summary["capacity"] == {"total": 0, "average": 0, "maximum": 0, "minimum": 0}
        assert summary["utilization"]["total_utilization"] == 0
