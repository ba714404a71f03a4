"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: Product + StockBatch (FEFO lot inventory)
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=255)),
                (
                    "barcode",
                    models.CharField(
                        blank=True,
                        help_text="EAN / manufacturer barcode (optional)",
                        max_length=64,
                        null=True,
                        unique=True,
                    ),
                ),
                ("strength", models.CharField(blank=True, max_length=64, null=True)),
                ("dosage_form", models.CharField(blank=True, max_length=64, null=True)),
                ("category", models.CharField(blank=True, max_length=128, null=True)),
                ("manufacturer", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "salt_formula",
                    models.CharField(
                        blank=True,
                        help_text="Active ingredient / salt formula, searchable",
                        max_length=255,
                        null=True,
                    ),
                ),
                ("min_stock", models.PositiveIntegerField(default=10)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="idx_product_name"),
                    models.Index(fields=["category"], name="idx_product_category"),
                    models.Index(fields=["is_active"], name="idx_product_is_active"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("name", ""), _negated=True),
                        name="chk_product_name_not_empty",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockBatch",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "batch_number",
                    models.CharField(help_text="Supplier / delivery batch reference", max_length=128),
                ),
                (
                    "quantity",
                    models.IntegerField(default=0, help_text="Remaining quantity (service-managed only)"),
                ),
                ("cost_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("selling_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("expiry_date", models.DateField()),
                ("purchase_date", models.DateField(default=django.utils.timezone.localdate)),
                ("supplier", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_batches",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["expiry_date", "created_at"],
                "indexes": [
                    models.Index(fields=["product", "expiry_date"], name="idx_stockbatch_product_expiry"),
                    models.Index(fields=["expiry_date"], name="idx_stockbatch_expiry"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 0)),
                        name="chk_stockbatch_quantity_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("cost_price__gt", 0)),
                        name="chk_stockbatch_cost_price_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("selling_price__gt", 0)),
                        name="chk_stockbatch_selling_price_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("expiry_date__gte", models.F("purchase_date"))),
                        name="chk_stockbatch_expiry_after_purchase",
                    ),
                ],
            },
        ),
    ]
