# products/serializers/stock_batch.py
"""
======================================================
PATH: products/serializers/stock_batch.py
======================================================
STOCK BATCH SERIALIZERS (READ)

Quantities are service-managed (sale / return settlement), so nothing
here is writable.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import StockBatch


class StockBatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = StockBatch
        fields = [
            "id",
            "product",
            "product_name",
            "batch_number",
            "quantity",
            "cost_price",
            "selling_price",
            "expiry_date",
            "purchase_date",
            "supplier",
            "is_expired",
            "created_at",
        ]
        read_only_fields = fields


class AvailableBatchSerializer(serializers.Serializer):
    """Shape of products.services.fefo.AvailableBatch (FEFO collaborator contract)."""

    id = serializers.CharField()
    batch_number = serializers.CharField(allow_blank=True)
    quantity = serializers.IntegerField()
    expiry_date = serializers.CharField(allow_blank=True)
