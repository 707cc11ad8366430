"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

import json

from rest_framework import serializers

from modules.orders.constants import MAX_QUANTITY, PaymentMethod
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single cart line in an order creation request."""

    product_id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=120)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0
    )


class JSONListField(serializers.ListField):
    """List field that also accepts a JSON-encoded string.

    Multipart requests cannot nest objects, so clients send ``items`` as
    a JSON string alongside the uploaded payment proof.
    """

    default_error_messages = {
        **serializers.ListField.default_error_messages,
        "invalid_json": "Items must be a JSON-encoded list.",
    }

    def get_value(self, dictionary):
        value = super().get_value(dictionary)
        if isinstance(value, list) and len(value) == 1 and isinstance(value[0], str):
            return value[0]
        return value

    def to_internal_value(self, data):
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                self.fail("invalid_json")
        return super().to_internal_value(data)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload.

    The customer is never part of the payload; it comes from the
    authenticated caller.
    """

    items = JSONListField(child=CreateOrderItemSerializer(), allow_empty=False)
    shipping_address = serializers.CharField(max_length=1000, trim_whitespace=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    image = serializers.FileField(required=False, allow_empty_file=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order line items."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "name",
            "category",
            "quantity",
            "unit_price",
            "total_price",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items."""

    customer_id = serializers.UUIDField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "customer_id",
            "unit_price",
            "total_price",
            "delivery",
            "shipping_address",
            "payment_method",
            "status",
            "payment_status",
            "payment_date",
            "pay_by",
            "confirmed_by",
            "cancelled_by",
            "delivery_start_time",
            "completed",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class AdminOrderDetailSerializer(OrderSerializer):
    """Order detail for admins, with the customer's contact email."""

    customer_email = serializers.EmailField(source="customer.email", read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = [*OrderSerializer.Meta.fields, "customer_email"]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested relations)."""

    customer_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "customer_id",
            "total_price",
            "payment_method",
            "status",
            "payment_status",
            "completed",
            "created_at",
        ]
        read_only_fields = fields
