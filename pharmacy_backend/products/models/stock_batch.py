# products/models/stock_batch.py

"""
STOCK BATCH (LOT-BASED INVENTORY)

Represents ONE inbound lot of a product.

RULES:
- quantity is the remaining quantity and must never go negative
  (DB check constraint + service-level guard)
- quantity is mutated ONLY by sale settlement (deduction) and
  return settlement (restoration), see products.services.batches
- Default ordering is FEFO: earliest expiry first, then oldest lot
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from .product import Product


class StockBatch(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="stock_batches",
    )

    batch_number = models.CharField(
        max_length=128,
        help_text="Supplier / delivery batch reference",
    )

    quantity = models.IntegerField(
        default=0,
        help_text="Remaining quantity (service-managed only)",
    )

    cost_price = models.DecimalField(max_digits=10, decimal_places=2)
    selling_price = models.DecimalField(max_digits=10, decimal_places=2)

    expiry_date = models.DateField()
    purchase_date = models.DateField(default=timezone.localdate)

    supplier = models.CharField(max_length=255, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["expiry_date", "created_at"]
        indexes = [
            models.Index(fields=["product", "expiry_date"], name="idx_stockbatch_product_expiry"),
            models.Index(fields=["expiry_date"], name="idx_stockbatch_expiry"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name="chk_stockbatch_quantity_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(cost_price__gt=0),
                name="chk_stockbatch_cost_price_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(selling_price__gt=0),
                name="chk_stockbatch_selling_price_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(expiry_date__gte=F("purchase_date")),
                name="chk_stockbatch_expiry_after_purchase",
            ),
        ]

    def clean(self):
        if self.quantity is None or self.quantity < 0:
            raise ValidationError({"quantity": "quantity cannot be negative"})

        for field in ("cost_price", "selling_price"):
            value = getattr(self, field)
            if value is None or Decimal(value) <= Decimal("0.00"):
                raise ValidationError({field: f"{field} must be greater than zero"})

        if self.expiry_date and self.purchase_date and self.expiry_date < self.purchase_date:
            raise ValidationError({"expiry_date": "expiry_date cannot precede purchase_date"})

    @property
    def is_expired(self) -> bool:
        return bool(self.expiry_date and self.expiry_date < timezone.localdate())

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | Batch {self.batch_number}"
