# products/services/batches.py

"""
======================================================
PATH: products/services/batches.py
======================================================
STOCK BATCH COLLABORATOR

Purpose:
- Read side: available batches for one product in FEFO order
  (the default get_available_batches capability for sale settlement).
- Write side: apply per-batch quantity deltas (negative = sale deduction,
  positive = return restoration).

Rules:
- ONE read for the whole id-set, deltas accumulated in memory per batch,
  then one write per batch.
- Rows are read with select_for_update() so that, inside the caller's
  transaction, a concurrent sale/return cannot interleave between the
  read and the write (no lost updates on Postgres).
- Remaining quantity never goes negative: the write is refused instead.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import Iterable, Mapping

from django.db import transaction

from products.models import StockBatch
from products.services.fefo import AvailableBatch, InsufficientStockError

logger = logging.getLogger(__name__)


def available_batches_for_product(product_id) -> list[AvailableBatch]:
    """
    Batches with stock for a product, earliest expiry first.
    """
    rows = (
        StockBatch.objects.filter(product_id=product_id, quantity__gt=0)
        .order_by("expiry_date", "created_at")
        .values("id", "batch_number", "quantity", "expiry_date")
    )
    return [
        AvailableBatch(
            id=str(row["id"]),
            batch_number=row["batch_number"] or "",
            quantity=int(row["quantity"] or 0),
            expiry_date=row["expiry_date"].isoformat() if row["expiry_date"] else "",
        )
        for row in rows
    ]


def _is_batch_id(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def fetch_batch_quantities(batch_ids: Iterable, *, lock: bool = False) -> dict[str, int]:
    """Current quantity per existing batch id; ids that match no batch are absent."""
    ids = {str(b) for b in batch_ids if b and _is_batch_id(b)}
    if not ids:
        return {}

    qs = StockBatch.objects.filter(id__in=ids)
    if lock:
        qs = qs.select_for_update()

    return {str(pk): int(qty or 0) for pk, qty in qs.values_list("id", "quantity")}


@transaction.atomic
def apply_quantity_deltas(deltas: Mapping[str, int]) -> dict[str, int]:
    """
    Apply summed quantity deltas per batch id and return the new quantities.

    Unknown batch ids are skipped with a warning (the batch was deleted
    after the sale was recorded); the remaining batches are still written.
    """
    merged: dict[str, int] = defaultdict(int)
    for batch_id, delta in deltas.items():
        if batch_id:
            merged[str(batch_id)] += int(delta)

    touched = {bid: d for bid, d in merged.items() if d != 0}
    if not touched:
        return {}

    current = fetch_batch_quantities(touched.keys(), lock=True)

    new_quantities: dict[str, int] = {}
    for batch_id, delta in touched.items():
        if batch_id not in current:
            logger.warning("Stock batch %s not found; skipping quantity delta %s", batch_id, delta)
            continue

        new_qty = current[batch_id] + delta
        if new_qty < 0:
            batch = StockBatch.objects.select_related("product").get(pk=batch_id)
            raise InsufficientStockError(batch.product.name, current[batch_id], -delta)

        new_quantities[batch_id] = new_qty

    # Independent keys: order does not matter.
    for batch_id, new_qty in new_quantities.items():
        StockBatch.objects.filter(pk=batch_id).update(quantity=new_qty)

    return new_quantities
