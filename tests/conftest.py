import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

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
from modules.core.authentication import TenantTokenUser
from modules.core.constants import RecordStatus, Role
from modules.core.identity import Identity
from modules.customers.models import Customer
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem

ADMIN_USER_ID = 1
CLIENT_USER_ID = 2
OTHER_CLIENT_USER_ID = 3


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Stats results and throttle counters live in the cache."""
    cache.clear()
    yield
    cache.clear()


def make_token_user(user_id, role, customer_id=None, **claims):
    return TenantTokenUser(
        {"user_id": user_id, "role": role, "customer_id": customer_id, **claims}
    )


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_type():
    return OrderType.objects.create(lookup_code="STD", name="Standard")


@pytest.fixture()
def carrier():
    return Carrier.objects.create(lookup_code="UPS", name="UPS")


@pytest.fixture()
def carrier_service(carrier):
    return CarrierService.objects.create(
        lookup_code="UPS-GND", carrier=carrier, name="Ground"
    )


@pytest.fixture()
def other_carrier():
    return Carrier.objects.create(lookup_code="FEDEX", name="FedEx")


@pytest.fixture()
def other_carrier_service(other_carrier):
    return CarrierService.objects.create(
        lookup_code="FEDEX-EXP", carrier=other_carrier, name="Express"
    )


def make_warehouse(lookup_code, state="TX", capacity=1000, **overrides):
    defaults = {
        "lookup_code": lookup_code,
        "name": f"Warehouse {lookup_code}",
        "address": "1 Logistics Way",
        "city": "Dallas",
        "state": state,
        "zip_code": "75201",
        "capacity": capacity,
    }
    defaults.update(overrides)
    return Warehouse.objects.create(**defaults)


@pytest.fixture()
def warehouse():
    return make_warehouse("WH-DAL", state="TX", capacity=1000)


@pytest.fixture()
def other_warehouse():
    return make_warehouse("WH-ATL", state="GA", capacity=3000, city="Atlanta")


def make_customer(lookup_code, **overrides):
    defaults = {
        "lookup_code": lookup_code,
        "name": f"{lookup_code.title()} Inc",
        "address": "100 Main Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
    }
    defaults.update(overrides)
    return Customer.objects.create(**defaults)


@pytest.fixture()
def customer():
    return make_customer("ACME", name="Acme Corporation")


@pytest.fixture()
def other_customer():
    return make_customer("GLOBEX", name="Globex Industries")


def make_account(customer, lookup_code, account_type=AccountType.SHIP_TO):
    return Account.objects.create(
        customer=customer,
        lookup_code=lookup_code,
        account_type=account_type,
        name=f"{customer.name} {lookup_code}",
        address="100 Main Street",
        city="Springfield",
        state="IL",
        zip_code="62701",
    )


@pytest.fixture()
def ship_to(customer):
    return make_account(customer, "ACME-SHIP", AccountType.SHIP_TO)


@pytest.fixture()
def bill_to(customer):
    return make_account(customer, "ACME-BILL", AccountType.BILL_TO)


@pytest.fixture()
def other_ship_to(other_customer):
    return make_account(other_customer, "GLOBEX-BOTH", AccountType.BOTH)


def make_material(lookup_code, **overrides):
    defaults = {
        "lookup_code": lookup_code,
        "code": lookup_code,
        "description": f"Material {lookup_code}",
        "uom": "EA",
        "available_quantity": 100,
    }
    defaults.update(overrides)
    return Material.objects.create(**defaults)


@pytest.fixture()
def material_a():
    return make_material("MAT-A")


@pytest.fixture()
def material_b():
    return make_material("MAT-B")


@pytest.fixture()
def assign_warehouse():
    def _assign(customer, warehouse, status=RecordStatus.ACTIVE):
        return CustomerWarehouse.objects.create(
            customer=customer, warehouse=warehouse, status=status
        )

    return _assign


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_payload(
    customer, order_type, ship_to, bill_to, carrier, carrier_service, warehouse,
    material_a, material_b,
):
    return {
        "customer_id": customer.id,
        "order_type_id": order_type.id,
        "ship_to_account_id": ship_to.id,
        "bill_to_account_id": bill_to.id,
        "carrier_id": carrier.id,
        "carrier_service_id": carrier_service.id,
        "warehouse_id": warehouse.id,
        "expected_delivery_date": "2030-01-15",
        "items": [
            {"material_id": material_a.id, "quantity": 2},
            {"material_id": material_b.id, "quantity": 3},
        ],
    }


@pytest.fixture()
def make_order(order_type, ship_to, bill_to, carrier, carrier_service, warehouse, material_a):
    """Create an order straight through the ORM (bypassing the service)."""

    def _make(customer=None, status=OrderStatus.DRAFT, items=None, **overrides):
        fields = {
            "order_type": order_type,
            "customer": customer or ship_to.customer,
            "ship_to_account": ship_to,
            "bill_to_account": bill_to,
            "carrier": carrier,
            "carrier_service": carrier_service,
            "warehouse": warehouse,
            "expected_delivery_date": "2030-01-15",
            "status": status,
        }
        fields.update(overrides)
        order = Order.objects.create(**fields)
        for material, quantity in items or [(material_a, 1)]:
            OrderItem.objects.create(order=order, material=material, quantity=quantity)
        return order

    return _make


# ---------------------------------------------------------------------------
# Identities and API clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def admin_identity():
    return Identity(user_id=ADMIN_USER_ID, role=Role.ADMIN)


@pytest.fixture()
def client_identity(customer):
    return Identity(user_id=CLIENT_USER_ID, role=Role.CLIENT, tenant_id=customer.id)


@pytest.fixture()
def other_client_identity(other_customer):
    return Identity(
        user_id=OTHER_CLIENT_USER_ID, role=Role.CLIENT, tenant_id=other_customer.id
    )


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def admin_client():
    client = APIClient()
    client.force_authenticate(user=make_token_user(ADMIN_USER_ID, Role.ADMIN))
    return client


@pytest.fixture()
def tenant_client(customer):
    client = APIClient()
    client.force_authenticate(
        user=make_token_user(CLIENT_USER_ID, Role.CLIENT, customer.id)
    )
    return client


@pytest.fixture()
def other_tenant_client(other_customer):
    client = APIClient()
    client.force_authenticate(
        user=make_token_user(OTHER_CLIENT_USER_ID, Role.CLIENT, other_customer.id)
    )
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Factories exposed as fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer_factory():
    return make_customer


@pytest.fixture()
def warehouse_factory():
    return make_warehouse


@pytest.fixture()
def account_factory():
    return make_account


@pytest.fixture()
def material_factory():
    return make_material


@pytest.fixture()
def token_user_factory():
    return make_token_user
