from __future__ import annotations

import random
from datetime import timedelta

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.catalog.models import (
    Account,
    AccountType,
    Carrier,
    CarrierService,
    CustomerWarehouse,
    Material,
    OrderType,
    Warehouse,
)
from modules.core.constants import Role
from modules.customers.models import Customer, Project, User
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=50)

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        order_types = self._seed_order_types()
        carriers = self._seed_carriers()
        self._seed_admin()
        warehouses = self._seed_warehouses()
        customers = self._seed_customers(warehouses)
        materials = self._seed_materials(customers)
        orders_created = self._seed_orders(
            customers, order_types, carriers, warehouses, materials, options["orders"]
        )

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"customers={len(customers)}, "
                f"warehouses={len(warehouses)}, "
                f"materials={len(materials)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_admin(self) -> None:
        self.stdout.write("Creating admin user...")
        User.objects.get_or_create(
            email="admin@example.com",
            defaults={
                "lookup_code": User.lookup_code_for("admin@example.com"),
                "password": make_password("ChangeMe!2024"),
                "role": Role.ADMIN,
            },
        )

    def _seed_order_types(self) -> list[OrderType]:
        self.stdout.write("Creating order types...")
        order_types = []
        for code, name in [("STD", "Standard"), ("EXP", "Expedited"), ("RET", "Return")]:
            order_type, _ = OrderType.objects.get_or_create(
                lookup_code=code, defaults={"name": name}
            )
            order_types.append(order_type)
        return order_types

    def _seed_carriers(self) -> list[Carrier]:
        self.stdout.write("Creating carriers...")
        catalog = {
            "UPS": ["Ground", "2nd Day Air", "Next Day Air"],
            "FEDEX": ["Ground", "Express Saver"],
            "USPS": ["Priority Mail"],
        }
        carriers = []
        for code, services in catalog.items():
            carrier, _ = Carrier.objects.get_or_create(
                lookup_code=code, defaults={"name": code.title()}
            )
            for index, service_name in enumerate(services, start=1):
                CarrierService.objects.get_or_create(
                    lookup_code=f"{code}-{index:02d}",
                    defaults={"carrier": carrier, "name": service_name},
                )
            carriers.append(carrier)
        return carriers

    def _seed_warehouses(self) -> list[Warehouse]:
        self.stdout.write("Creating warehouses...")
        seed_warehouses = [
            ("WH-ATL", "Atlanta DC", "Atlanta", "GA", "30301", 12000),
            ("WH-DAL", "Dallas DC", "Dallas", "TX", "75201", 18000),
            ("WH-HOU", "Houston DC", "Houston", "TX", "77001", 9000),
            ("WH-RNO", "Reno DC", "Reno", "NV", "89501", 15000),
        ]
        warehouses = []
        for code, name, city, state, zip_code, capacity in seed_warehouses:
            warehouse, _ = Warehouse.objects.get_or_create(
                lookup_code=code,
                defaults={
                    "name": name,
                    "address": f"1 {city} Logistics Way",
                    "city": city,
                    "state": state,
                    "zip_code": zip_code,
                    "capacity": capacity,
                },
            )
            warehouses.append(warehouse)
        return warehouses

    def _seed_customers(self, warehouses: list[Warehouse]) -> list[Customer]:
        self.stdout.write("Creating customers...")
        seed_customers = [
            ("ACME", "Acme Corporation", "Springfield", "IL", "62701"),
            ("GLOBEX", "Globex Industries", "Cypress Creek", "OR", "97001"),
            ("INITECH", "Initech LLC", "Austin", "TX", "73301"),
        ]
        customers = []
        for code, name, city, state, zip_code in seed_customers:
            customer, created = Customer.objects.get_or_create(
                lookup_code=code,
                defaults={
                    "name": name,
                    "address": "100 Main Street",
                    "city": city,
                    "state": state,
                    "zip_code": zip_code,
                    "email": f"orders@{code.lower()}.example.com",
                },
            )
            customers.append(customer)
            if not created:
                continue

            Project.objects.create(
                customer=customer,
                lookup_code=f"{code}-MAIN",
                name=f"{name} main project",
                is_default=True,
            )
            email = f"buyer@{code.lower()}.example.com"
            User.objects.create(
                customer=customer,
                email=email,
                lookup_code=User.lookup_code_for(email),
                password=make_password("ChangeMe!2024"),
                role=Role.CLIENT,
            )
            for account_type in (AccountType.SHIP_TO, AccountType.BILL_TO):
                Account.objects.create(
                    customer=customer,
                    lookup_code=f"{code}-{account_type}",
                    account_type=account_type,
                    name=f"{name} {account_type.label}",
                    address="100 Main Street",
                    city=city,
                    state=state,
                    zip_code=zip_code,
                )
            for warehouse in random.sample(warehouses, k=2):
                CustomerWarehouse.objects.create(customer=customer, warehouse=warehouse)
        return customers

    def _seed_materials(self, customers: list[Customer]) -> list[Material]:
        self.stdout.write("Creating materials...")
        materials = []
        for customer in customers:
            project = customer.projects.filter(is_default=True).first()
            for index in range(1, 6):
                material, _ = Material.objects.get_or_create(
                    lookup_code=f"{customer.lookup_code}-MAT-{index:03d}",
                    defaults={
                        "project": project,
                        "code": f"MAT-{index:03d}",
                        "description": f"Material {index} for {customer.name}",
                        "uom": "EA",
                        "available_quantity": random.randint(10, 500),
                    },
                )
                materials.append(material)
        return materials

    def _seed_orders(
        self,
        customers: list[Customer],
        order_types: list[OrderType],
        carriers: list[Carrier],
        warehouses: list[Warehouse],
        materials: list[Material],
        count: int,
    ) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        statuses = [s for s in OrderStatus]
        weights = [0.4, 0.2, 0.2, 0.2]

        for _ in range(count):
            customer = random.choice(customers)
            carrier = random.choice(carriers)
            accounts = {a.account_type: a for a in customer.accounts.all()}
            order = Order.objects.create(
                status=random.choices(statuses, weights=weights, k=1)[0],
                order_type=random.choice(order_types),
                customer=customer,
                ship_to_account=accounts[AccountType.SHIP_TO],
                bill_to_account=accounts[AccountType.BILL_TO],
                carrier=carrier,
                carrier_service=carrier.services.order_by("?").first(),
                warehouse=random.choice(warehouses),
                expected_delivery_date=timezone.localdate()
                + timedelta(days=random.randint(3, 30)),
            )
            created_at = timezone.now() - timedelta(days=random.randint(0, 330))
            Order.objects.filter(id=order.id).update(created_at=created_at)

            own_materials = [m for m in materials if m.lookup_code.startswith(customer.lookup_code)]
            OrderItem.objects.bulk_create(
                OrderItem(order=order, material=material, quantity=random.randint(1, 20))
                for material in random.sample(own_materials, k=random.randint(1, 3))
            )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
