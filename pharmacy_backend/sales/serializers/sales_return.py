# sales/serializers/sales_return.py

from rest_framework import serializers

from sales.models import ReturnItem, SalesReturn


class ReturnItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnItem
        fields = [
            "id",
            "sale_item",
            "product",
            "batch",
            "quantity",
            "created_at",
        ]
        read_only_fields = fields


class SalesReturnSerializer(serializers.ModelSerializer):
    return_items = ReturnItemSerializer(many=True, read_only=True)

    class Meta:
        model = SalesReturn
        fields = [
            "id",
            "sale",
            "receipt_number",
            "return_reason",
            "returned_by",
            "created_at",
            "return_items",
        ]
        read_only_fields = fields
