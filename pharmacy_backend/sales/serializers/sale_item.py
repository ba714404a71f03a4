# sales/serializers/sale_item.py

from rest_framework import serializers

from sales.models import SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line item serializer (read-only).
    Designed for receipts + the return screen (returned / returnable).
    """

    returned_quantity = serializers.SerializerMethodField()
    returnable_quantity = serializers.SerializerMethodField()

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "total",
            "batch_deductions",
            "returned_quantity",
            "returnable_quantity",
        ]
        read_only_fields = fields

    def get_returned_quantity(self, obj) -> int:
        # Uses the prefetched relation when the queryset provides it.
        return sum(int(ri.quantity) for ri in obj.return_items.all())

    def get_returnable_quantity(self, obj) -> int:
        return max(int(obj.quantity) - self.get_returned_quantity(obj), 0)
