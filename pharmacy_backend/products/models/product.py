# products/models/product.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum


class Product(models.Model):
    """
    Represents a sellable product (medicine or general item).

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in StockBatch rows (one per inbound lot)
    - Identity is immutable; descriptive fields belong to catalog management
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)

    barcode = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="EAN / manufacturer barcode (optional)",
    )

    strength = models.CharField(max_length=64, blank=True, null=True)
    dosage_form = models.CharField(max_length=64, blank=True, null=True)
    category = models.CharField(max_length=128, blank=True, null=True)
    manufacturer = models.CharField(max_length=255, blank=True, null=True)

    salt_formula = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        help_text="Active ingredient / salt formula, searchable",
    )

    min_stock = models.PositiveIntegerField(default=10)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="idx_product_name"),
            models.Index(fields=["category"], name="idx_product_category"),
            models.Index(fields=["is_active"], name="idx_product_is_active"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_product_name_not_empty",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "Product name cannot be empty"})

    @property
    def total_stock(self) -> int:
        """Sum of remaining quantity across all batches."""
        return int(
            self.stock_batches.aggregate(total=Sum("quantity")).get("total") or 0
        )

    @property
    def is_low_stock(self) -> bool:
        return self.total_stock <= int(self.min_stock or 0)
