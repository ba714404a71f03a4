# sales/models/sale.py

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q


class Sale(models.Model):
    """
    Represents a completed POS transaction.

    GUARANTEES:
    - Written once by sale settlement, never edited afterwards
    - Stock is mutated ONLY via products.services.batches
    - total is the sum of the caller's line totals (not recomputed)
    - Returns never edit the Sale; they append SalesReturn rows
    """

    PAYMENT_CASH = "cash"
    PAYMENT_CARD = "card"
    PAYMENT_MOBILE = "mobile"

    PAYMENT_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CARD, "Card"),
        (PAYMENT_MOBILE, "Mobile"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt_number = models.CharField(
        max_length=64,
        unique=True,
        help_text="System-generated receipt number (PREFIX-00001)",
    )

    total = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    payment_method = models.CharField(
        max_length=32,
        default=PAYMENT_CASH,
        help_text="cash/card/mobile",
    )

    cashier_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        help_text="Identity of the staff member who processed the sale",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="idx_sale_created_at"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total__gte=0),
                name="chk_sale_total_gte_zero",
            ),
            models.CheckConstraint(
                condition=~Q(receipt_number=""),
                name="chk_sale_receipt_number_not_empty",
            ),
        ]

    def __str__(self):
        return f"{self.receipt_number} | {self.total}"
