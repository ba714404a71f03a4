# sales/serializers/input.py

"""
REQUEST SHAPES (WRITE SIDE)

Structural validation only: business rules (stock, return window,
return ceiling) stay in sales.services.
"""

from rest_framework import serializers


class CartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    product_name = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    strength = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    available_stock = serializers.IntegerField(required=False, allow_null=True)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        value["product_id"] = str(value["product_id"])
        return value


class CheckoutInputSerializer(serializers.Serializer):
    items = CartItemInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.CharField(max_length=32, required=False, default="cash")
    discount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        default=0,
    )


class ReturnLineInputSerializer(serializers.Serializer):
    sale_item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        value["sale_item_id"] = str(value["sale_item_id"])
        return value


class ReturnInputSerializer(serializers.Serializer):
    items = ReturnLineInputSerializer(many=True, allow_empty=False)
    reason = serializers.CharField(max_length=1000)
