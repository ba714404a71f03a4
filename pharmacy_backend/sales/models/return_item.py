# sales/models/return_item.py

import uuid

from django.db import models
from django.db.models import Q

from products.models import Product, StockBatch

from .sale_item import SaleItem
from .sales_return import SalesReturn


class ReturnItem(models.Model):
    """
    Restored quantity for one sale line, attributed to one batch.

    batch is NULL when the sale line carried no deduction ledger: stock was
    restored without batch attribution.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sales_return = models.ForeignKey(
        SalesReturn,
        on_delete=models.CASCADE,
        related_name="return_items",
    )

    sale_item = models.ForeignKey(
        SaleItem,
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    batch = models.ForeignKey(
        StockBatch,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="return_items",
    )

    quantity = models.PositiveIntegerField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sale_item"], name="idx_returnitem_sale_item"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_returnitem_quantity_gt_zero",
            ),
        ]

    def __str__(self):
        return f"{self.product_id} x {self.quantity} -> {self.batch_id or 'unattributed'}"
