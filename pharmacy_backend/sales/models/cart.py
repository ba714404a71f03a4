# sales/models/cart.py

"""
CART ITEM (TRANSIENT, NOT PERSISTED)

A line of the till's cart as submitted for settlement.

- total is the caller's line total and is trusted by settlement as-is.
- available_stock is a display snapshot only; FEFO allocation always
  re-reads batches and never uses it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping


def _as_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0.00")


@dataclass
class CartItem:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    strength: str | None = None
    available_stock: int | None = None

    @property
    def is_identified(self) -> bool:
        return bool(self.product_id) and bool((self.product_name or "").strip())

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CartItem":
        return cls(
            product_id=str(raw.get("product_id") or ""),
            product_name=str(raw.get("product_name") or ""),
            quantity=raw.get("quantity"),
            unit_price=_as_decimal(raw.get("unit_price")),
            total=_as_decimal(raw.get("total")),
            strength=raw.get("strength"),
            available_stock=raw.get("available_stock"),
        )

    @classmethod
    def coerce(cls, item) -> "CartItem":
        if isinstance(item, cls):
            return item
        if isinstance(item, Mapping):
            return cls.from_dict(item)
        raise TypeError(f"Cannot build a CartItem from {type(item).__name__}")
