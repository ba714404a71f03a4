# sales/models/sales_return.py

"""
SALES RETURN (APPEND-ONLY)

One return submission against a Sale. A sale may have several partial
returns over multiple visits; each is written once by return settlement
and never edited.
"""

import uuid

from django.db import models

from .sale import Sale


class SalesReturn(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        related_name="returns",
    )

    receipt_number = models.CharField(
        max_length=64,
        help_text="Return receipt number (RET-YYYYMMDD-NNNNNN)",
    )

    return_reason = models.TextField()

    returned_by = models.CharField(max_length=64, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="idx_salesreturn_sale_created"),
        ]

    def __str__(self):
        return f"{self.receipt_number} (sale {self.sale_id})"
