"""
======================================================
PATH: products/views/stock_batch.py
======================================================
STOCK BATCH VIEWSET (READ)

Quantity mutation is service-managed (sale / return settlement);
this endpoint only exposes the ledger state for staff.

Filters: see products.filters.StockBatchFilter
"""

from __future__ import annotations

from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from products.filters import StockBatchFilter
from products.models import StockBatch
from products.serializers import StockBatchSerializer


class StockBatchViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = StockBatchSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = StockBatchFilter

    def get_queryset(self):
        return StockBatch.objects.select_related("product").order_by("expiry_date", "created_at")
