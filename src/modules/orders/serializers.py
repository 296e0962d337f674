"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views): it checks the
request shape and renders responses.  Business logic lives in the Service
Layer, which receives Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import (
    Account,
    Carrier,
    CarrierService,
    Material,
    OrderType,
    Warehouse,
)
from modules.customers.models import Customer
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderItemInputSerializer(serializers.Serializer):
    """Validates a single requested line."""

    material_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload.

    ``expected_delivery_date`` is taken as text and parsed by the service.
    """

    customer_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    order_type_id = serializers.IntegerField(min_value=1)
    ship_to_account_id = serializers.IntegerField(min_value=1)
    bill_to_account_id = serializers.IntegerField(min_value=1)
    carrier_id = serializers.IntegerField(min_value=1)
    carrier_service_id = serializers.IntegerField(min_value=1)
    warehouse_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    expected_delivery_date = serializers.CharField(max_length=40)
    items = OrderItemInputSerializer(many=True, allow_empty=False)


class UpdateOrderSerializer(serializers.Serializer):
    """Validates an order amendment.  Every field is optional.

    ``warehouse_id: null`` clears the warehouse.  ``items``, when present,
    replaces the whole item set and must not be empty.
    """

    order_type_id = serializers.IntegerField(min_value=1, required=False)
    ship_to_account_id = serializers.IntegerField(min_value=1, required=False)
    bill_to_account_id = serializers.IntegerField(min_value=1, required=False)
    carrier_id = serializers.IntegerField(min_value=1, required=False)
    carrier_service_id = serializers.IntegerField(min_value=1, required=False)
    warehouse_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    expected_delivery_date = serializers.CharField(
        max_length=40, required=False, allow_blank=True
    )
    items = OrderItemInputSerializer(many=True, allow_empty=False, required=False)
    version = serializers.IntegerField(min_value=1, required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderTypeSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderType
        fields = ["id", "lookup_code", "name"]
        read_only_fields = fields


class CustomerSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "lookup_code", "name"]
        read_only_fields = fields


class AccountSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Account
        fields = [
            "id",
            "lookup_code",
            "name",
            "account_type",
            "address",
            "city",
            "state",
            "zip_code",
        ]
        read_only_fields = fields


class CarrierSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Carrier
        fields = ["id", "lookup_code", "name"]
        read_only_fields = fields


class CarrierServiceSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = CarrierService
        fields = ["id", "lookup_code", "name", "description"]
        read_only_fields = fields


class WarehouseSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ["id", "lookup_code", "name", "city", "state"]
        read_only_fields = fields


class MaterialSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Material
        fields = ["id", "code", "description", "uom"]
        read_only_fields = fields


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with material display fields."""

    material = MaterialSummarySerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "material_id", "material", "quantity", "status"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order with joined display fields and items."""

    status_name = serializers.CharField(source="get_status_display", read_only=True)
    order_type = OrderTypeSummarySerializer(read_only=True)
    customer = CustomerSummarySerializer(read_only=True)
    ship_to_account = AccountSummarySerializer(read_only=True)
    bill_to_account = AccountSummarySerializer(read_only=True)
    carrier = CarrierSummarySerializer(read_only=True)
    carrier_service = CarrierServiceSummarySerializer(read_only=True)
    warehouse = WarehouseSummarySerializer(read_only=True, allow_null=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "lookup_code",
            "status",
            "status_name",
            "order_type_id",
            "order_type",
            "customer_id",
            "customer",
            "ship_to_account_id",
            "ship_to_account",
            "bill_to_account_id",
            "bill_to_account",
            "carrier_id",
            "carrier",
            "carrier_service_id",
            "carrier_service",
            "warehouse_id",
            "warehouse",
            "expected_delivery_date",
            "version",
            "items",
            "created_at",
            "created_by",
            "modified_at",
            "modified_by",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for the order list (no nested relations)."""

    status_name = serializers.CharField(source="get_status_display", read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    total_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "status_name",
            "customer_id",
            "customer_name",
            "expected_delivery_date",
            "item_count",
            "total_quantity",
            "version",
            "created_at",
        ]
        read_only_fields = fields
