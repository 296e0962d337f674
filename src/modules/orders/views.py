"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP responses by
``modules.core.api.error_response``; the view never swallows generic
exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.api import error_response
from modules.core.exceptions import DomainError
from modules.core.identity import Identity
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderSerializer,
)
from modules.orders.services import OrderService

MUTATING_ACTIONS = {"create", "update", "partial_update", "destroy"}


class OrderPagination(StandardResultsSetPagination):
    results_key = "orders"


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with an injected repository (DIP).
    Does **not** extend ``ModelViewSet``: all ORM writes go through the
    service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    pagination_class = OrderPagination
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "expected_delivery_date", "status", "id"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(order_repository=OrderDjangoRepository())

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scope per action."""
        self.throttle_scope = "order_mutation" if self.action in MUTATING_ACTIONS else None
        return super().get_throttles()

    def _identity(self, request: Request) -> Identity:
        return Identity.from_user(request.user)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateOrderDTO(**serializer.validated_data)

        try:
            order = self._service.create_order(dto, self._identity(request))
        except DomainError as exc:
            return error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        return self._service.list_orders(self._identity(self.request))

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, customer, creation date range) is handled by
        ``OrderFilter``; ordering by ``OrderingFilter``.  Results are
        paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(int(pk), self._identity(request))
        except DomainError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Update / Destroy
    # ------------------------------------------------------------------

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/

        Amendments are always partial: absent fields keep their value.
        """
        identity = self._identity(request)
        try:
            self._service.ensure_updatable(int(pk), identity)
        except DomainError as exc:
            return error_response(exc)

        serializer = UpdateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateOrderDTO(**serializer.validated_data)

        try:
            order = self._service.update_order(int(pk), dto, identity)
        except DomainError as exc:
            return error_response(exc)

        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        try:
            self._service.delete_order(int(pk), self._identity(request))
        except DomainError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
