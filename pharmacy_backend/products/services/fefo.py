# products/services/fefo.py

"""
FEFO ALLOCATION (PURE)

Purpose:
- Turn a requested quantity for one product into an ordered list of
  BatchDeduction records, consuming the earliest-expiring batch first.
- Compute the plan ONLY. Nothing here touches the database; stock is
  written later by products.services.batches.apply_quantity_deltas().

Contract:
- Batches arrive already sorted by expiry ascending (collaborator ordering
  is trusted, never re-sorted here).
- total_available < quantity  -> InsufficientStockError, no plan returned.
- Deductions always sum exactly to the requested quantity and each one
  is > 0 and <= its source batch quantity.
- Dirty batch rows degrade instead of failing: missing quantity counts as 0,
  missing batch_number / expiry_date become "".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


# ============================================================
# DOMAIN ERRORS
# ============================================================

class InsufficientStockError(Exception):
    def __init__(self, product_name: str, available: int, requested: int | None = None):
        self.product_name = product_name
        self.available = int(available)
        self.requested = requested
        super().__init__(f"Insufficient stock for {product_name}. Available: {self.available}")


# ============================================================
# VALUE TYPES
# ============================================================

@dataclass(frozen=True)
class BatchDeduction:
    """One slice of a sale line item sourced from a single batch."""

    batch_id: str
    batch_number: str
    quantity: int
    expiry_date: str

    def as_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "batch_number": self.batch_number,
            "quantity": self.quantity,
            "expiry_date": self.expiry_date,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "BatchDeduction":
        return cls(
            batch_id=str(raw.get("batch_id") or ""),
            batch_number=str(raw.get("batch_number") or ""),
            quantity=_as_quantity(raw.get("quantity")),
            expiry_date=str(raw.get("expiry_date") or ""),
        )


@dataclass(frozen=True)
class AvailableBatch:
    id: str
    batch_number: str
    quantity: int
    expiry_date: str


def _as_quantity(value) -> int:
    if value is None or value == "" or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _field(batch, name: str):
    if isinstance(batch, Mapping):
        return batch.get(name)
    return getattr(batch, name, None)


def normalize_batch(batch) -> AvailableBatch:
    expiry = _field(batch, "expiry_date")
    return AvailableBatch(
        id=str(_field(batch, "id") or ""),
        batch_number=str(_field(batch, "batch_number") or ""),
        quantity=_as_quantity(_field(batch, "quantity")),
        expiry_date=expiry.isoformat() if hasattr(expiry, "isoformat") else str(expiry or ""),
    )


# ============================================================
# ALLOCATION
# ============================================================

def allocate_fefo(
    *,
    quantity: int,
    batches: Iterable[Any],
    product_name: str = "product",
) -> list[BatchDeduction]:
    """
    Plan a FEFO deduction for `quantity` units over `batches`.

    `batches` may hold AvailableBatch objects, mappings or model instances
    exposing id / batch_number / quantity / expiry_date.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError("quantity must be a positive whole number")

    normalized = [normalize_batch(b) for b in (batches or []) if b is not None]

    total_available = sum(b.quantity for b in normalized if b.quantity > 0)
    if total_available < quantity:
        raise InsufficientStockError(product_name, total_available, quantity)

    remaining = quantity
    deductions: list[BatchDeduction] = []

    for batch in normalized:
        if remaining <= 0:
            break

        take = min(batch.quantity, remaining)
        if take <= 0:
            continue

        deductions.append(
            BatchDeduction(
                batch_id=batch.id,
                batch_number=batch.batch_number,
                quantity=take,
                expiry_date=batch.expiry_date,
            )
        )
        remaining -= take

    return deductions
