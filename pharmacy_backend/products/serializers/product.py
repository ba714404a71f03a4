# products/serializers/product.py

"""
PRODUCT SERIALIZER (READ)

Stock is derived from StockBatch only. List views annotate `stock_total`
to avoid one aggregate query per product; single objects fall back to
Product.total_stock.
"""

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    total_stock = serializers.SerializerMethodField(read_only=True)
    is_low_stock = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "barcode",
            "strength",
            "dosage_form",
            "category",
            "manufacturer",
            "salt_formula",
            "min_stock",
            "total_stock",
            "is_low_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_total_stock(self, obj: Product) -> int:
        annotated = getattr(obj, "stock_total", None)
        if annotated is not None:
            return int(annotated)
        return obj.total_stock

    def get_is_low_stock(self, obj: Product) -> bool:
        return self.get_total_stock(obj) <= int(obj.min_stock or 0)
