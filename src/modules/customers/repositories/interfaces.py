"""Customer repository interface.

Extends ``IRepository[Customer]`` with the look-ups the aggregate rules
need (lookup-code and e-mail uniqueness) and the aggregate writes that
replace projects, users and warehouse assignments wholesale.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer, Project, User


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Customer]":
        """List customers with optional filters."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Customer]:
        """Retrieve a customer with a row lock (``SELECT ... FOR UPDATE``)."""

    @abstractmethod
    def lookup_code_taken(self, lookup_code: str, exclude_id: Optional[int] = None) -> bool:
        """Whether another customer already uses ``lookup_code``."""

    @abstractmethod
    def taken_project_codes(
        self, codes: Iterable[str], exclude_customer_id: Optional[int] = None
    ) -> List[str]:
        """Project lookup codes among ``codes`` used by other customers."""

    @abstractmethod
    def taken_emails(
        self, emails: Iterable[str], exclude_customer_id: Optional[int] = None
    ) -> List[str]:
        """User e-mails among ``emails`` used outside the given customer."""

    @abstractmethod
    def create(
        self,
        customer: Customer,
        projects: Sequence[Project],
        users: Sequence[User],
        warehouse_ids: Sequence[int],
    ) -> Customer:
        """Insert the customer and its children."""

    @abstractmethod
    def update(
        self,
        customer: Customer,
        projects: Optional[Sequence[Project]] = None,
        users: Optional[Sequence[User]] = None,
        warehouse_ids: Optional[Sequence[int]] = None,
    ) -> Customer:
        """Save scalar changes and replace each supplied child collection."""
