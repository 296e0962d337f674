"""Django ORM implementation of the Customer repository.

Satisfies ``ICustomerRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising, and the Service Layer decides how to translate a
missing aggregate into an API response.

Aggregate writes must run inside the service's ``transaction.atomic()``
block: child collections go through ``replace_children``, which refuses to
run otherwise.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog
from django.db.models import Prefetch, QuerySet

from modules.catalog.models import CustomerWarehouse
from modules.core.repositories.children import replace_children
from modules.customers.models import Customer, Project, User
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def _aggregate_queryset(self) -> QuerySet[Customer]:
        return Customer.objects.prefetch_related(
            Prefetch("projects", queryset=Project.objects.order_by("id")),
            Prefetch("users", queryset=User.objects.order_by("id")),
            Prefetch(
                "warehouse_assignments",
                queryset=CustomerWarehouse.objects.order_by("warehouse_id"),
            ),
        )

    def get_by_id(self, id: int) -> Optional[Customer]:
        """Retrieve a customer with its children.  ``None`` if absent or invalid."""
        try:
            return self._aggregate_queryset().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Customer]:
        try:
            return Customer.objects.select_for_update().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Customer]:
        """List customers with optional Django ORM look-ups.

        Examples of valid filters::

            {"status": 1}
            {"name__icontains": "acme", "status": 1}
        """
        queryset = self._aggregate_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def lookup_code_taken(self, lookup_code: str, exclude_id: Optional[int] = None) -> bool:
        queryset = Customer.objects.filter(lookup_code=lookup_code)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def taken_project_codes(
        self, codes: Iterable[str], exclude_customer_id: Optional[int] = None
    ) -> List[str]:
        queryset = Project.objects.filter(lookup_code__in=list(codes))
        if exclude_customer_id is not None:
            queryset = queryset.exclude(customer_id=exclude_customer_id)
        return sorted(queryset.values_list("lookup_code", flat=True))

    def taken_emails(
        self, emails: Iterable[str], exclude_customer_id: Optional[int] = None
    ) -> List[str]:
        queryset = User.objects.filter(email__in=list(emails))
        if exclude_customer_id is not None:
            queryset = queryset.exclude(customer_id=exclude_customer_id)
        return sorted(queryset.values_list("email", flat=True))

    def create(
        self,
        customer: Customer,
        projects: Sequence[Project],
        users: Sequence[User],
        warehouse_ids: Sequence[int],
    ) -> Customer:
        customer.save()
        self._replace_projects(customer, projects)
        self._replace_users(customer, users)
        self._replace_warehouses(customer, warehouse_ids)
        logger.info(
            "customer.saved",
            customer_id=customer.id,
            projects=len(projects),
            users=len(users),
            warehouses=len(warehouse_ids),
        )
        return customer

    def update(
        self,
        customer: Customer,
        projects: Optional[Sequence[Project]] = None,
        users: Optional[Sequence[User]] = None,
        warehouse_ids: Optional[Sequence[int]] = None,
    ) -> Customer:
        customer.save()
        if projects is not None:
            self._replace_projects(customer, projects)
        if users is not None:
            self._replace_users(customer, users)
        if warehouse_ids is not None:
            self._replace_warehouses(customer, warehouse_ids)
        logger.info(
            "customer.saved",
            customer_id=customer.id,
            version=customer.version,
            projects_replaced=projects is not None,
            users_replaced=users is not None,
            warehouses_replaced=warehouse_ids is not None,
        )
        return customer

    def delete(self, id: int) -> bool:
        """Hard-delete a customer and its children.

        Returns ``False`` if no customer exists with the given ID.  Raises
        ``django.db.models.ProtectedError`` when orders or accounts still
        reference it.
        """
        customer = self.get_for_update(id)
        if not customer:
            return False
        CustomerWarehouse.objects.filter(customer_id=id).delete()
        Project.objects.filter(customer_id=id).delete()
        User.objects.filter(customer_id=id).delete()
        customer.delete()
        logger.info("customer.deleted", customer_id=id)
        return True

    # ------------------------------------------------------------------
    # Child collections
    # ------------------------------------------------------------------

    def _replace_projects(self, customer: Customer, projects: Sequence[Project]) -> None:
        replace_children(Project, "customer", customer.id, projects)

    def _replace_users(self, customer: Customer, users: Sequence[User]) -> None:
        replace_children(User, "customer", customer.id, users)

    def _replace_warehouses(self, customer: Customer, warehouse_ids: Sequence[int]) -> None:
        rows = [
            CustomerWarehouse(
                warehouse_id=warehouse_id,
                created_by=customer.modified_by,
                modified_by=customer.modified_by,
            )
            for warehouse_id in dict.fromkeys(warehouse_ids)
        ]
        replace_children(CustomerWarehouse, "customer", customer.id, rows)
