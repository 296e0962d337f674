"""Stats Aggregator: read-only order and warehouse roll-ups.

Every query is tenant-scoped: ``customer_id=None`` means the global (admin)
view, anything else restricts the figures to that customer.  Results are
plain dicts ready for JSON and are cached per scope (``modules.stats.cache``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import structlog
from django.db.models import Avg, Count, Max, Min, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from modules.catalog.models import CustomerWarehouse, Warehouse
from modules.core.constants import RecordStatus
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.stats import cache as stats_cache

logger = structlog.get_logger(__name__)

DEFAULT_PERIOD_MONTHS = 12
TOP_LIMIT = 5
RECENT_ORDER_DAYS = 30


def percentage(part: int, whole: int) -> str:
    return f"{(part / whole) * 100:.1f}" if whole else "0.0"


@dataclass(frozen=True)
class OrderStatsQuery:
    customer_id: Optional[int] = None
    period_months: int = DEFAULT_PERIOD_MONTHS


@dataclass(frozen=True)
class WarehouseStatsQuery:
    """``include_customer_distribution`` is the role projection: ADMIN only."""

    customer_id: Optional[int] = None
    include_customer_distribution: bool = False


class OrderStatsService:
    def get_stats(self, query: OrderStatsQuery) -> Dict[str, Any]:
        return stats_cache.cached(
            "orders",
            stats_cache.scope_for(query.customer_id),
            f"p{query.period_months}",
            lambda: self.compute(query),
        )

    def compute(self, query: OrderStatsQuery, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or timezone.now()
        start = now - timedelta(days=30 * query.period_months)

        orders = Order.objects.filter(created_at__gte=start)
        items = OrderItem.objects.filter(order__created_at__gte=start)
        if query.customer_id is not None:
            orders = orders.filter(customer_id=query.customer_id)
            items = items.filter(order__customer_id=query.customer_id)

        total = orders.count()

        by_status = [
            {
                "status": row["status"],
                "status_name": OrderStatus(row["status"]).label,
                "count": row["count"],
                "percentage": percentage(row["count"], total),
            }
            for row in orders.order_by()
            .values("status")
            .annotate(count=Count("id"))
            .order_by("status")
        ]

        by_month = [
            {"month": row["month"].strftime("%Y-%m"), "count": row["count"]}
            for row in orders.order_by()
            .annotate(month=TruncMonth("created_at"))
            .values("month")
            .annotate(count=Count("id"))
            .order_by("month")
        ]

        top_carriers = [
            {
                "carrier_id": row["carrier_id"],
                "carrier_name": row["carrier__name"],
                "order_count": row["order_count"],
            }
            for row in orders.order_by()
            .values("carrier_id", "carrier__name")
            .annotate(order_count=Count("id"))
            .order_by("-order_count", "carrier_id")[:TOP_LIMIT]
        ]

        top_materials = [
            {
                "material_id": row["material_id"],
                "material_code": row["material__code"],
                "order_count": row["order_count"],
                "total_quantity": row["total_quantity"],
            }
            for row in items.order_by()
            .values("material_id", "material__code")
            .annotate(
                order_count=Count("order_id", distinct=True),
                total_quantity=Sum("quantity"),
            )
            .order_by("-total_quantity", "material_id")[:TOP_LIMIT]
        ]

        logger.info(
            "stats.orders_computed",
            customer_id=query.customer_id,
            period_months=query.period_months,
            total_orders=total,
        )
        return {
            "period_months": query.period_months,
            "total_orders": total,
            "orders_by_status": by_status,
            "orders_by_month": by_month,
            "top_carriers": top_carriers,
            "top_materials": top_materials,
        }


class WarehouseStatsService:
    def get_stats(self, query: WarehouseStatsQuery) -> Dict[str, Any]:
        return stats_cache.cached(
            "warehouses",
            stats_cache.scope_for(query.customer_id),
            f"c{int(query.include_customer_distribution)}",
            lambda: self.compute(query),
        )

    def compute(
        self, query: WarehouseStatsQuery, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or timezone.now()

        warehouses = Warehouse.objects.filter(status=RecordStatus.ACTIVE)
        recent_orders = Order.objects.filter(
            created_at__gte=now - timedelta(days=RECENT_ORDER_DAYS)
        )
        if query.customer_id is not None:
            warehouses = warehouses.filter(
                id__in=CustomerWarehouse.objects.filter(
                    customer_id=query.customer_id, status=RecordStatus.ACTIVE
                ).values("warehouse_id")
            )
            recent_orders = recent_orders.filter(customer_id=query.customer_id)
        recent_orders = recent_orders.filter(warehouse__in=warehouses)

        active_count = warehouses.count()
        capacity = warehouses.aggregate(
            total=Sum("capacity"),
            average=Avg("capacity"),
            maximum=Max("capacity"),
            minimum=Min("capacity"),
        )

        state_rows = list(
            warehouses.order_by()
            .values("state")
            .annotate(warehouse_count=Count("id"), total_capacity=Sum("capacity"))
            .order_by("state")
        )
        total_capacity = capacity["total"] or 0

        orders_by_warehouse = [
            {"warehouse_id": row["warehouse_id"], "order_count": row["order_count"]}
            for row in recent_orders.order_by()
            .values("warehouse_id")
            .annotate(order_count=Count("id"))
            .order_by("warehouse_id")
        ]

        distributions: Dict[str, List[Dict[str, Any]]] = {
            "by_state": [
                {
                    "state": row["state"],
                    "count": row["warehouse_count"],
                    "total_capacity": row["total_capacity"] or 0,
                }
                for row in state_rows
            ]
        }
        if query.include_customer_distribution:
            distributions["by_customer"] = [
                {"warehouse_id": row["warehouse_id"], "customer_count": row["customer_count"]}
                for row in CustomerWarehouse.objects.filter(warehouse__in=warehouses)
                .order_by()
                .values("warehouse_id")
                .annotate(customer_count=Count("customer_id"))
                .order_by("warehouse_id")
            ]

        logger.info(
            "stats.warehouses_computed",
            customer_id=query.customer_id,
            active_warehouses=active_count,
        )
        return {
            "summary": {
                "total_active_warehouses": active_count,
                "capacity": {
                    "total": total_capacity,
                    "average": round(capacity["average"] or 0),
                    "maximum": capacity["maximum"] or 0,
                    "minimum": capacity["minimum"] or 0,
                },
                "utilization": {
                    "by_state": [
                        {
                            "state": row["state"],
                            "warehouse_count": row["warehouse_count"],
                            "total_capacity": row["total_capacity"] or 0,
                            "utilization_percentage": percentage(
                                row["warehouse_count"], active_count
                            ),
                        }
                        for row in state_rows
                    ],
                    "total_utilization": (
                        round(total_capacity / active_count, 2) if active_count else 0
                    ),
                },
                "orders": {
                    "last_30_days": sum(r["order_count"] for r in orders_by_warehouse),
                    "by_warehouse": orders_by_warehouse,
                },
            },
            "distributions": distributions,
        }
