"""Customer API views.

Exposes the ``CustomerService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP responses by
``modules.core.api.error_response``; the view never swallows generic
exceptions.  Every endpoint is ADMIN-only.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.api import error_response, pydantic_error_response
from modules.core.exceptions import DomainError
from modules.core.identity import Identity
from modules.core.pagination import StandardResultsSetPagination
from modules.core.permissions import IsAdminRole
from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO
from modules.customers.filters import CustomerFilter
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from modules.customers.services import CustomerService


class CustomerPagination(StandardResultsSetPagination):
    results_key = "customers"


class CustomerViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for the Customer aggregate.

    Uses ``CustomerService`` with ``CustomerDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM writes go through the
    service/repository layer.
    """

    permission_classes = [IsAuthenticated, IsAdminRole]
    pagination_class = CustomerPagination
    filterset_class = CustomerFilter
    search_fields = ["name", "lookup_code", "email"]
    ordering_fields = ["created_at", "id", "name", "lookup_code"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Customer.objects.none()
    serializer_class = CustomerSerializer
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CustomerService(repository=CustomerDjangoRepository())

    def _identity(self, request: Request) -> Identity:
        return Identity.from_user(request.user)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Customer.objects.none()
        return self._service.list_customers(self._identity(self.request))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        try:
            customer = self._service.get_customer(int(pk), self._identity(request))
        except DomainError as exc:
            return error_response(exc)
        return Response(CustomerSerializer(customer).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/customers/"""
        try:
            dto = CreateCustomerDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        try:
            customer = self._service.create_customer(dto, self._identity(request))
        except DomainError as exc:
            return error_response(exc)

        out = CustomerSerializer(customer)
        return Response(out.data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/customers/{pk}/

        Both verbs merge: customer scalars are applied when present and each
        supplied child collection replaces the stored one.
        """
        try:
            dto = UpdateCustomerDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return pydantic_error_response(exc)

        try:
            customer = self._service.update_customer(
                int(pk), dto, self._identity(request)
            )
        except DomainError as exc:
            return error_response(exc)

        return Response(CustomerSerializer(customer).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/customers/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/customers/{pk}/"""
        try:
            self._service.delete_customer(int(pk), self._identity(request))
        except DomainError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
