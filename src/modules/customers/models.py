"""Customer aggregate: the tenant root with its projects and users.

Business rules implemented:
- ``lookup_code`` is unique for customers and projects.
- User e-mail is unique across the whole system.
- A customer's non-empty project set has exactly one default project
  (checked by the service, backed by a partial unique index).
- Passwords are stored only as one-way hashes (``make_password``).

Projects and users are owned children: they are written only through the
customer aggregate mutations, never on their own.
"""

from __future__ import annotations

from typing import Optional

from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.db.models import Q

from modules.core.constants import RecordStatus, Role
from modules.core.models import AuditedModel, VersionedModel


class Customer(VersionedModel):
    """Customer aggregate root (tenant)."""

    lookup_code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=50)
    zip_code = models.CharField(max_length=20)
    phone = models.CharField(max_length=30, null=True, blank=True)
    email = models.EmailField(max_length=254, null=True, blank=True)
    status = models.PositiveSmallIntegerField(
        choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )

    class Meta:
        db_table = "customers"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
            models.Index(fields=["status"], name="customers_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.lookup_code} - {self.name}"


class Project(AuditedModel):
    customer = models.ForeignKey(
        Customer, on_delete=models.CASCADE, related_name="projects"
    )
    lookup_code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    is_default = models.BooleanField(default=False)
    status = models.PositiveSmallIntegerField(
        choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )

    class Meta:
        db_table = "projects"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer"],
                condition=Q(is_default=True),
                name="projects_one_default_per_customer",
            ),
        ]

    def __str__(self) -> str:
        return self.lookup_code


class User(AuditedModel):
    """Application user belonging to a customer (``customer`` is null for admins).

    Not Django's auth user: identities are verified from bearer tokens and
    this row only records the account owned by the tenant aggregate.
    """

    customer = models.ForeignKey(
        Customer,
        on_delete=models.CASCADE,
        related_name="users",
        null=True,
        blank=True,
    )
    lookup_code = models.CharField(max_length=100, db_index=True)
    email = models.EmailField(max_length=254, unique=True)
    password = models.CharField(max_length=128)
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.CLIENT)
    status = models.PositiveSmallIntegerField(
        choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )

    class Meta:
        db_table = "users"
        ordering = ["id"]

    @staticmethod
    def lookup_code_for(email: str) -> str:
        """``jane.doe@acme.com`` -> ``JANE.DOE``."""
        return email.split("@", 1)[0].upper()

    def set_password(self, raw_password: Optional[str]) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)

    def __str__(self) -> str:
        return self.email
