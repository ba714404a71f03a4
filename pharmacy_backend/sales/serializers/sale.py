# sales/serializers/sale.py

from decimal import Decimal

from rest_framework import serializers

from sales.models import Sale
from sales.services.return_policy import is_return_eligible

from .sale_item import SaleItemSerializer
from .sales_return import SalesReturnSerializer


class SaleSerializer(serializers.ModelSerializer):
    """
    CANONICAL SALE SERIALIZER

    Used for receipts, sales history and the return screen.

    Return visibility (UI support):
        refunded_amount_total   unit_price x returned quantity, all returns
        is_return_eligible      sale still inside the return window
    """

    items = SaleItemSerializer(many=True, read_only=True)
    returns = SalesReturnSerializer(many=True, read_only=True)

    refunded_amount_total = serializers.SerializerMethodField()
    is_return_eligible = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            "id",
            "receipt_number",
            "total",
            "discount",
            "payment_method",
            "cashier_id",
            "created_at",
            "items",
            "returns",
            "refunded_amount_total",
            "is_return_eligible",
        ]
        read_only_fields = fields

    def get_refunded_amount_total(self, obj) -> str:
        prices = {item.id: Decimal(item.unit_price) for item in obj.items.all()}
        total = Decimal("0.00")
        for sales_return in obj.returns.all():
            for ri in sales_return.return_items.all():
                total += prices.get(ri.sale_item_id, Decimal("0.00")) * ri.quantity
        return str(total.quantize(Decimal("0.01")))

    def get_is_return_eligible(self, obj) -> bool:
        return is_return_eligible(obj.created_at)
