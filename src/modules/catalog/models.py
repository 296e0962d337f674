"""Reference entities orders point at.

These rows are maintained outside the order and customer aggregates; the
engines only read them (see ``modules.catalog.validators``).  Every entity
carries a unique ``lookup_code`` and an active/inactive ``status``.
"""

from __future__ import annotations

from django.db import models

from modules.core.constants import RecordStatus
from modules.core.models import AuditedModel


class AccountType(models.TextChoices):
    SHIP_TO = "SHIP_TO", "Ship to"
    BILL_TO = "BILL_TO", "Bill to"
    BOTH = "BOTH", "Ship to and bill to"


class ReferenceModel(AuditedModel):
    lookup_code = models.CharField(max_length=50, unique=True)
    status = models.PositiveSmallIntegerField(
        choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )

    class Meta:
        abstract = True


class OrderType(ReferenceModel):
    name = models.CharField(max_length=100)
    description = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "order_types"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class Carrier(ReferenceModel):
    name = models.CharField(max_length=100)

    class Meta:
        db_table = "carriers"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class CarrierService(ReferenceModel):
    carrier = models.ForeignKey(
        Carrier, on_delete=models.CASCADE, related_name="services"
    )
    name = models.CharField(max_length=100)
    description = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "carrier_services"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.carrier_id}:{self.name}"


class Warehouse(ReferenceModel):
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=50)
    zip_code = models.CharField(max_length=20)
    phone = models.CharField(max_length=30, null=True, blank=True)
    email = models.EmailField(max_length=254, null=True, blank=True)
    capacity = models.PositiveIntegerField()

    class Meta:
        db_table = "warehouses"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["status", "state"], name="warehouses_status_state_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class Account(ReferenceModel):
    """Ship-to / bill-to address owned by a customer."""

    customer = models.ForeignKey(
        "customers.Customer", on_delete=models.PROTECT, related_name="accounts"
    )
    account_type = models.CharField(
        max_length=10, choices=AccountType.choices, default=AccountType.SHIP_TO
    )
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=50)
    zip_code = models.CharField(max_length=20)
    phone = models.CharField(max_length=30, null=True, blank=True)
    email = models.EmailField(max_length=254, null=True, blank=True)
    contact_name = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = "accounts"
        ordering = ["id"]

    def can_ship_to(self) -> bool:
        return self.account_type in (AccountType.SHIP_TO, AccountType.BOTH)

    def can_bill_to(self) -> bool:
        return self.account_type in (AccountType.BILL_TO, AccountType.BOTH)

    def __str__(self) -> str:
        return f"{self.lookup_code} ({self.account_type})"


class Material(ReferenceModel):
    project = models.ForeignKey(
        "customers.Project",
        on_delete=models.SET_NULL,
        related_name="materials",
        null=True,
        blank=True,
    )
    code = models.CharField(max_length=50)
    description = models.CharField(max_length=255)
    uom = models.CharField(max_length=20)
    available_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "materials"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.code


class CustomerWarehouse(AuditedModel):
    """Assignment of a warehouse to a customer, owned by the customer aggregate."""

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="warehouse_assignments",
    )
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.CASCADE, related_name="customer_assignments"
    )
    status = models.PositiveSmallIntegerField(
        choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )

    class Meta:
        db_table = "customer_warehouses"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "warehouse"],
                name="customer_warehouses_unique_pair",
            ),
        ]
