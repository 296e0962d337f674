"""Customer service layer (Use Cases).

Orchestrates the Customer aggregate (customer + projects + users +
warehouse assignments), delegating persistence to the injected
``ICustomerRepository``.

Every mutation follows the same shape: validate the whole payload and
collect every failing rule, check uniqueness, then write the root and
replace each supplied child collection inside one transaction.

Business rules enforced here:
- Only ADMIN identities may mutate or read customers.
- Required customer fields: lookup code, name, address, city, state, ZIP.
- A non-empty project set has exactly one default project.
- No duplicate project lookup codes or user e-mails inside a payload.
- Customer lookup codes, project lookup codes and user e-mails are unique.
- Users are stored as ACTIVE ``CLIENT``s with a hashed password (a
  placeholder when none is supplied).
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError, QuerySet

from modules.catalog.validators import (
    WAREHOUSES_NOT_FOUND,
    EntityKind,
    ReferenceValidator,
)
from modules.core.constants import RecordStatus, Role
from modules.core.exceptions import AccessDenied
from modules.customers.events import CustomerCreated, CustomerDeleted, CustomerUpdated
from modules.customers.exceptions import (
    CustomerAlreadyExists,
    CustomerInUse,
    CustomerNotFound,
    CustomerValidationFailed,
    CustomerVersionConflict,
)
from modules.customers.models import Customer, Project, User
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.core.identity import Identity
    from modules.customers.dtos import (
        CreateCustomerDTO,
        CustomerFieldsDTO,
        ProjectDTO,
        UpdateCustomerDTO,
        UserDTO,
    )
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = (
    ("lookup_code", "Customer Code"),
    ("name", "Customer Name"),
    ("address", "Address"),
    ("city", "City"),
    ("state", "State"),
    ("zip_code", "ZIP Code"),
)
SCALAR_FIELDS = (
    "lookup_code",
    "name",
    "address",
    "city",
    "state",
    "zip_code",
    "phone",
    "email",
    "status",
)

DEFAULT_PROJECT_REQUIRED = "Exactly one default project is required"
STATUS_REQUIRED = "Status cannot be null"


class CustomerService:
    """Application service for Customer aggregate use-cases.

    Receives an ``ICustomerRepository`` via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: ICustomerRepository,
        validator: Optional[ReferenceValidator] = None,
    ) -> None:
        self._repo = repository
        self._validator = validator or ReferenceValidator()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_customer(self, dto: CreateCustomerDTO, identity: Identity) -> Customer:
        """Create a customer with its projects, users and warehouse assignments.

        Raises:
            AccessDenied: the identity is not an ADMIN.
            CustomerValidationFailed: one or more rules failed (all listed).
            CustomerAlreadyExists: a lookup code or e-mail is already taken.
        """
        self._require_admin(identity)
        log = logger.bind(lookup_code=dto.customer.lookup_code, user_id=identity.user_id)

        errors = self._missing_required(dto.customer, partial=False)
        errors += self._child_errors(dto.projects, dto.users, dto.warehouse_ids)
        if errors:
            log.warning("customer.validation_failed", errors=errors)
            raise CustomerValidationFailed(details=errors)

        conflicts = self._conflicts(
            dto.customer.lookup_code, dto.projects, dto.users, customer_id=None
        )
        if conflicts:
            log.warning("customer.conflict", conflicts=conflicts)
            raise CustomerAlreadyExists(details=conflicts)

        customer = Customer(
            **{
                field: getattr(dto.customer, field)
                for field in SCALAR_FIELDS
                if getattr(dto.customer, field) is not None
            }
        )
        customer.status = RecordStatus.ACTIVE
        customer.stamp(identity.user_id)

        try:
            with transaction.atomic():
                customer = self._repo.create(
                    customer,
                    self._build_projects(dto.projects, identity),
                    self._build_users(dto.users, identity),
                    dto.warehouse_ids,
                )
        except IntegrityError as exc:
            log.warning("customer.integrity_error", error=str(exc))
            self._raise_conflict(dto, customer_id=None)
            raise

        event_bus.publish_on_commit(
            [CustomerCreated(aggregate_id=customer.id, customer_id=customer.id)]
        )
        log.info("customer.created", customer_id=customer.id)
        return self._reload(customer.id)

    @transaction.atomic
    def update_customer(
        self, id: int, dto: UpdateCustomerDTO, identity: Identity
    ) -> Customer:
        """Merge scalar fields and replace every supplied child collection.

        Raises:
            AccessDenied: the identity is not an ADMIN.
            CustomerNotFound: the customer does not exist.
            CustomerVersionConflict: ``dto.version`` is stale.
            CustomerValidationFailed: one or more rules failed (all listed).
            CustomerAlreadyExists: a lookup code or e-mail is already taken.
        """
        self._require_admin(identity)
        log = logger.bind(customer_id=id, user_id=identity.user_id)

        customer = self._repo.get_for_update(id)
        if not customer:
            log.warning("customer.not_found")
            raise CustomerNotFound()

        if dto.version is not None and dto.version != customer.version:
            log.warning(
                "customer.version_conflict",
                expected=dto.version,
                actual=customer.version,
            )
            raise CustomerVersionConflict()

        errors: List[str] = []
        if dto.customer is not None:
            errors += self._missing_required(dto.customer, partial=True)
        errors += self._child_errors(
            dto.projects or [], dto.users or [], dto.warehouse_ids or []
        )
        if errors:
            log.warning("customer.validation_failed", errors=errors)
            raise CustomerValidationFailed(details=errors)

        conflicts = self._conflicts(
            dto.customer.lookup_code if dto.customer else None,
            dto.projects or [],
            dto.users or [],
            customer_id=customer.id,
        )
        if conflicts:
            log.warning("customer.conflict", conflicts=conflicts)
            raise CustomerAlreadyExists(details=conflicts)

        if dto.customer is not None:
            for field in dto.customer.model_fields_set & set(SCALAR_FIELDS):
                setattr(customer, field, getattr(dto.customer, field))
        customer.version += 1
        customer.stamp(identity.user_id)

        try:
            with transaction.atomic():
                self._repo.update(
                    customer,
                    projects=(
                        self._build_projects(dto.projects, identity)
                        if dto.projects is not None
                        else None
                    ),
                    users=(
                        self._build_users(dto.users, identity)
                        if dto.users is not None
                        else None
                    ),
                    warehouse_ids=dto.warehouse_ids,
                )
        except IntegrityError as exc:
            log.warning("customer.integrity_error", error=str(exc))
            self._raise_conflict(dto, customer_id=customer.id)
            raise

        event_bus.publish_on_commit(
            [CustomerUpdated(aggregate_id=customer.id, customer_id=customer.id)]
        )
        log.info("customer.updated", version=customer.version)
        return self._reload(customer.id)

    @transaction.atomic
    def delete_customer(self, id: int, identity: Identity) -> None:
        """Delete the customer with its projects, users and assignments.

        Raises:
            AccessDenied: the identity is not an ADMIN.
            CustomerNotFound: the customer does not exist.
            CustomerInUse: orders or accounts still reference the customer.
        """
        self._require_admin(identity)
        log = logger.bind(customer_id=id, user_id=identity.user_id)

        try:
            deleted = self._repo.delete(id)
        except ProtectedError as exc:
            log.warning("customer.delete_protected")
            raise CustomerInUse() from exc

        if not deleted:
            log.warning("customer.not_found")
            raise CustomerNotFound()

        event_bus.publish_on_commit([CustomerDeleted(aggregate_id=id, customer_id=id)])
        log.info("customer.deleted")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_customers(
        self, identity: Identity, filters: Optional[Dict[str, Any]] = None
    ) -> QuerySet[Customer]:
        """Return customers, optionally filtered."""
        self._require_admin(identity)
        return self._repo.list(filters)

    def get_customer(self, id: int, identity: Identity) -> Customer:
        """Retrieve a single customer aggregate by ID.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        self._require_admin(identity)
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound()
        logger.info("customer.retrieved", customer_id=id)
        return customer

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @staticmethod
    def _require_admin(identity: Identity) -> None:
        if not identity.is_admin:
            logger.warning("customer.access_denied", user_id=identity.user_id)
            raise AccessDenied("Admin access required")

    @staticmethod
    def _missing_required(fields: CustomerFieldsDTO, *, partial: bool) -> List[str]:
        errors = []
        for name, label in REQUIRED_FIELDS:
            if partial and name not in fields.model_fields_set:
                continue
            value = getattr(fields, name)
            if value is None or not str(value).strip():
                errors.append(f"{label} is required")
        if "status" in fields.model_fields_set and fields.status is None:
            errors.append(STATUS_REQUIRED)
        return errors

    def _child_errors(
        self,
        projects: Sequence[ProjectDTO],
        users: Sequence[UserDTO],
        warehouse_ids: Sequence[int],
    ) -> List[str]:
        errors = []

        if projects and sum(1 for p in projects if p.is_default) != 1:
            errors.append(DEFAULT_PROJECT_REQUIRED)

        for code, count in Counter(p.lookup_code for p in projects).items():
            if count > 1:
                errors.append(f"Duplicate project lookup code: {code}")

        for email, count in Counter(u.email for u in users).items():
            if count > 1:
                errors.append(f"Duplicate user email: {email}")

        if self._validator.missing_ids(EntityKind.WAREHOUSE, warehouse_ids):
            errors.append(WAREHOUSES_NOT_FOUND)

        return errors

    def _conflicts(
        self,
        lookup_code: Optional[str],
        projects: Sequence[ProjectDTO],
        users: Sequence[UserDTO],
        *,
        customer_id: Optional[int],
    ) -> List[str]:
        conflicts = []
        if lookup_code and self._repo.lookup_code_taken(lookup_code, exclude_id=customer_id):
            conflicts.append(f"Customer lookup code already exists: {lookup_code}")
        for code in self._repo.taken_project_codes(
            [p.lookup_code for p in projects], exclude_customer_id=customer_id
        ):
            conflicts.append(f"Project lookup code already exists: {code}")
        for email in self._repo.taken_emails(
            [u.email for u in users], exclude_customer_id=customer_id
        ):
            conflicts.append(f"User email already exists: {email}")
        return conflicts

    def _raise_conflict(
        self,
        dto: CreateCustomerDTO | UpdateCustomerDTO,
        *,
        customer_id: Optional[int],
    ) -> None:
        """Re-check uniqueness after a failed write; raise when a rival row won the race."""
        conflicts = self._conflicts(
            dto.customer.lookup_code if dto.customer else None,
            dto.projects or [],
            dto.users or [],
            customer_id=customer_id,
        )
        if conflicts:
            raise CustomerAlreadyExists(details=conflicts)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    @staticmethod
    def _build_projects(projects: Sequence[ProjectDTO], identity: Identity) -> List[Project]:
        return [
            Project(
                lookup_code=p.lookup_code,
                name=p.name,
                description=p.description,
                is_default=p.is_default,
                status=RecordStatus.ACTIVE,
                created_by=identity.user_id,
                modified_by=identity.user_id,
            )
            for p in projects
        ]

    @staticmethod
    def _build_users(users: Sequence[UserDTO], identity: Identity) -> List[User]:
        rows = []
        for u in users:
            user = User(
                email=u.email,
                lookup_code=User.lookup_code_for(u.email),
                role=Role.CLIENT,
                status=RecordStatus.ACTIVE,
                created_by=identity.user_id,
                modified_by=identity.user_id,
            )
            user.set_password(u.password or settings.DEFAULT_USER_PASSWORD)
            rows.append(user)
        return rows

    def _reload(self, id: int) -> Customer:
        customer = self._repo.get_by_id(id)
        if customer is None:
            raise CustomerNotFound()
        return customer
