# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Products are edited freely (catalog data).
- StockBatch quantity is service-managed: it is read-only on the batch
  change page so admin edits never race with sale / return settlement.
  The product inline is the intake path for new lots.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, StockBatch


class StockBatchInline(admin.TabularInline):
    model = StockBatch
    extra = 0
    fields = (
        "batch_number",
        "quantity",
        "cost_price",
        "selling_price",
        "expiry_date",
        "purchase_date",
        "supplier",
    )
    ordering = ("expiry_date", "created_at")
    can_delete = False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "barcode", "strength", "category", "min_stock", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("name", "barcode", "salt_formula")
    ordering = ("name",)
    inlines = [StockBatchInline]


@admin.register(StockBatch)
class StockBatchAdmin(admin.ModelAdmin):
    list_display = ("product", "batch_number", "quantity", "expiry_date", "selling_price")
    list_filter = ("expiry_date",)
    search_fields = ("batch_number", "product__name")
    ordering = ("expiry_date", "created_at")
    readonly_fields = ("quantity", "created_at")

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ("created_at",)
        return self.readonly_fields
