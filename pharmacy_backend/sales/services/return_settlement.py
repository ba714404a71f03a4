# sales/services/return_settlement.py

"""
======================================================
PATH: sales/services/return_settlement.py
======================================================
RETURN SETTLEMENT (MECHANISM ONLY)

Purpose:
- Persist one SalesReturn with its ReturnItem rows.
- Restore stock to the batches the sale drew from, walking each line's
  deduction ledger in its original order.

NOT done here (see sales.services.return_policy):
- return window eligibility
- the per-line "never return more than was sold" ceiling

Lines without a ledger are restored in full with batch = NULL and no
batch quantity is touched for them. The same applies to ledger entries
whose batch no longer exists.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from django.db import DatabaseError, transaction

from products.services.batches import apply_quantity_deltas, fetch_batch_quantities
from products.services.fefo import BatchDeduction
from sales.models import ReturnItem, SalesReturn
from sales.services.exceptions import InvalidReturnRequestError, PersistenceFailure
from sales.services.receipt_numbers import return_receipt_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReturnRequestItem:
    sale_item_id: str
    product_id: str
    quantity: int
    batch_deductions: tuple[BatchDeduction, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ReturnRequestItem":
        if not isinstance(raw, Mapping):
            raise InvalidReturnRequestError()

        sale_item_id = raw.get("sale_item_id")
        product_id = raw.get("product_id")
        quantity = raw.get("quantity")

        if not sale_item_id or not product_id:
            raise InvalidReturnRequestError()
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidReturnRequestError("Return quantity must be a positive whole number")

        ledger = raw.get("batch_deductions") or []
        deductions = tuple(
            d if isinstance(d, BatchDeduction) else BatchDeduction.from_dict(d)
            for d in ledger
            if isinstance(d, (BatchDeduction, Mapping))
        )

        return cls(
            sale_item_id=str(sale_item_id),
            product_id=str(product_id),
            quantity=quantity,
            batch_deductions=deductions,
        )

    @classmethod
    def coerce(cls, item) -> "ReturnRequestItem":
        return item if isinstance(item, cls) else cls.from_dict(item)


@dataclass(frozen=True)
class RestorationLine:
    sale_item_id: str
    product_id: str
    batch_id: str | None
    quantity: int


def plan_return_items(items: Iterable[ReturnRequestItem]) -> list[RestorationLine]:
    lines: list[RestorationLine] = []

    for item in items:
        if not item.batch_deductions:
            lines.append(
                RestorationLine(
                    sale_item_id=item.sale_item_id,
                    product_id=item.product_id,
                    batch_id=None,
                    quantity=item.quantity,
                )
            )
            continue

        remaining = item.quantity
        for deduction in item.batch_deductions:
            if remaining <= 0:
                break

            restore = min(deduction.quantity, remaining)
            if restore <= 0:
                continue

            lines.append(
                RestorationLine(
                    sale_item_id=item.sale_item_id,
                    product_id=item.product_id,
                    batch_id=deduction.batch_id or None,
                    quantity=restore,
                )
            )
            remaining -= restore

        if remaining > 0:
            logger.warning(
                "Deduction ledger of sale item %s covers %s fewer unit(s) than requested; "
                "remainder not restored",
                item.sale_item_id,
                remaining,
            )

    return lines


def _detach_missing_batches(lines: list[RestorationLine]) -> list[RestorationLine]:
    existing = fetch_batch_quantities((line.batch_id for line in lines), lock=True)

    resolved = []
    for line in lines:
        if line.batch_id and line.batch_id not in existing:
            logger.warning(
                "Stock batch %s of sale item %s no longer exists; restoring %s unit(s) without batch",
                line.batch_id,
                line.sale_item_id,
                line.quantity,
            )
            line = replace(line, batch_id=None)
        resolved.append(line)
    return resolved


def _restored_per_batch(lines: Iterable[RestorationLine]) -> dict[str, int]:
    restored: dict[str, int] = defaultdict(int)
    for line in lines:
        if line.batch_id:
            restored[line.batch_id] += line.quantity
    return dict(restored)


def settle_return(
    *,
    sale_id,
    items,
    reason: str,
    returned_by: str | None = None,
) -> SalesReturn:
    """
    Record a return against `sale_id` and restore stock.

    Raises:
    - InvalidReturnRequestError: no sale id / no items / malformed item
    - PersistenceFailure: the database rejected a write
    """
    if not sale_id or not items:
        raise InvalidReturnRequestError()

    request_items = [ReturnRequestItem.coerce(item) for item in items]
    lines = plan_return_items(request_items)

    try:
        with transaction.atomic():
            lines = _detach_missing_batches(lines)

            sales_return = SalesReturn.objects.create(
                sale_id=sale_id,
                receipt_number=return_receipt_number(),
                return_reason=reason or "",
                returned_by=returned_by,
            )

            if lines:
                ReturnItem.objects.bulk_create(
                    [
                        ReturnItem(
                            sales_return=sales_return,
                            sale_item_id=line.sale_item_id,
                            product_id=line.product_id,
                            batch_id=line.batch_id,
                            quantity=line.quantity,
                        )
                        for line in lines
                    ]
                )

            apply_quantity_deltas(_restored_per_batch(lines))
    except DatabaseError as exc:
        logger.exception("Return settlement failed for sale %s", sale_id)
        raise PersistenceFailure(str(exc)) from exc

    logger.info(
        "Return %s recorded for sale %s: %s line(s)",
        sales_return.receipt_number,
        sale_id,
        len(lines),
    )
    return sales_return
