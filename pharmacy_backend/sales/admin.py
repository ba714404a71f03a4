# sales/admin.py

from django.contrib import admin

from sales.models import ReturnItem, Sale, SaleItem, SalesReturn


# ======================================================
# READ-ONLY BASE
# Sales and returns are written by settlement services only.
# ======================================================


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class SaleItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = SaleItem
    extra = 0
    fields = ("product_name", "quantity", "unit_price", "total", "batch_deductions")
    readonly_fields = fields


# ======================================================
# SALE ADMIN
# ======================================================


@admin.register(Sale)
class SaleAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "receipt_number",
        "total",
        "discount",
        "payment_method",
        "cashier_id",
        "created_at",
    )
    search_fields = ("receipt_number",)
    list_filter = ("payment_method", "created_at")
    inlines = [SaleItemInline]


# ======================================================
# RETURN ADMIN
# ======================================================


class ReturnItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = ReturnItem
    extra = 0
    fields = ("sale_item", "product", "batch", "quantity", "created_at")
    readonly_fields = fields


@admin.register(SalesReturn)
class SalesReturnAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "receipt_number",
        "sale",
        "returned_by",
        "created_at",
    )
    search_fields = ("receipt_number", "sale__receipt_number")
    list_filter = ("created_at",)
    inlines = [ReturnItemInline]
