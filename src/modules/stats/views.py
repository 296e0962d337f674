"""Stats API views (read-only, cached per tenant scope)."""

from __future__ import annotations

from typing import Optional

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.identity import Identity
from modules.stats.services import (
    DEFAULT_PERIOD_MONTHS,
    OrderStatsQuery,
    OrderStatsService,
    WarehouseStatsQuery,
    WarehouseStatsService,
)

MAX_PERIOD_MONTHS = 120


def _positive_int(value: Optional[str], name: str, maximum: Optional[int] = None) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError({name: ["A valid integer is required."]})
    if number < 1 or (maximum is not None and number > maximum):
        message = f"Must be between 1 and {maximum}." if maximum else "Must be a positive integer."
        raise ValidationError({name: [message]})
    return number


class OrderStatsView(APIView):
    """GET /api/v1/orders/stats/

    Admins see every tenant unless ``customer`` narrows the figures;
    clients always see their own tenant only.
    """

    throttle_scope = "stats"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderStatsService()

    @extend_schema(
        parameters=[
            OpenApiParameter("period", OpenApiTypes.INT, description="Months to cover"),
            OpenApiParameter("customer", OpenApiTypes.INT, description="Admin only"),
        ],
        responses=OpenApiTypes.OBJECT,
    )
    def get(self, request: Request) -> Response:
        identity = Identity.from_user(request.user)
        period = _positive_int(
            request.query_params.get("period"), "period", MAX_PERIOD_MONTHS
        )
        customer_id = identity.scope()
        if identity.is_admin:
            customer_id = _positive_int(request.query_params.get("customer"), "customer")

        stats = self._service.get_stats(
            OrderStatsQuery(
                customer_id=customer_id,
                period_months=period or DEFAULT_PERIOD_MONTHS,
            )
        )
        return Response(stats)


class WarehouseStatsView(APIView):
    """GET /api/v1/warehouses/stats/"""

    throttle_scope = "stats"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = WarehouseStatsService()

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request: Request) -> Response:
        identity = Identity.from_user(request.user)
        stats = self._service.get_stats(
            WarehouseStatsQuery(
                customer_id=identity.scope(),
                include_customer_distribution=identity.is_admin,
            )
        )
        return Response(stats)
