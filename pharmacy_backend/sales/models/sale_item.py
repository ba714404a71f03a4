# sales/models/sale_item.py

"""
SALE ITEM (IMMUTABLE SNAPSHOT)

Represents an immutable snapshot of a sold line item.

Notes:
- batch_deductions is the FEFO ledger written at settlement: an ordered
  list of {batch_id, batch_number, quantity, expiry_date}. Returns walk it
  in the same order to restore stock to the batches the sale drew from.
- Legacy rows may carry no ledger (NULL); returns then restore without
  batch attribution.
"""

from __future__ import annotations

import uuid

from django.db import models
from django.db.models import Q, Sum

from products.models import Product
from products.services.fefo import BatchDeduction

from .sale import Sale


class SaleItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    # Denormalized so receipts survive catalog renames.
    product_name = models.CharField(max_length=255)

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total = models.DecimalField(max_digits=12, decimal_places=2)

    position = models.PositiveIntegerField(default=0, help_text="Line order within the sale")

    batch_deductions = models.JSONField(
        null=True,
        blank=True,
        help_text="Ordered FEFO deduction ledger written at settlement",
    )

    class Meta:
        ordering = ["sale", "position"]
        indexes = [
            models.Index(fields=["sale"], name="idx_saleitem_sale"),
            models.Index(fields=["product"], name="idx_saleitem_product"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_saleitem_quantity_gt_zero",
            ),
        ]

    @property
    def deductions(self) -> list[BatchDeduction]:
        raw = self.batch_deductions or []
        if not isinstance(raw, list):
            return []
        return [BatchDeduction.from_dict(d) for d in raw if isinstance(d, dict)]

    def returned_quantity(self) -> int:
        """Units of this line already restored across every SalesReturn of its sale."""
        return int(self.return_items.aggregate(total=Sum("quantity")).get("total") or 0)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
