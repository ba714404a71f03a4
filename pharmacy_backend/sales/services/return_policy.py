# sales/services/return_policy.py

"""
RETURN POLICY (PURE PREDICATES + CALLER-SIDE GATE)

Kept apart from return settlement so the window and the ceiling can be
tested, and changed, without touching stock restoration.

- Eligibility: now - sale.created_at <= RETURN_WINDOW_DAYS (exact timedelta,
  so 2 days is eligible and 2 days + 1 second is not).
- Ceiling: per sale line, returned so far + requested <= sold quantity.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta

from django.db.models import Sum
from django.utils import timezone

from sales.conf import pos_setting
from sales.models import ReturnItem
from sales.services.exceptions import (
    InvalidReturnRequestError,
    ReturnQuantityExceededError,
    ReturnWindowExpiredError,
)
from sales.services.return_settlement import ReturnRequestItem


def is_return_eligible(
    sale_created_at: datetime | None,
    now: datetime | None = None,
    *,
    window_days: int | None = None,
) -> bool:
    if sale_created_at is None:
        return False

    now = now or timezone.now()
    days = pos_setting("RETURN_WINDOW_DAYS") if window_days is None else window_days
    return now - sale_created_at <= timedelta(days=int(days))


def already_returned_quantities(sale) -> dict[str, int]:
    rows = (
        ReturnItem.objects.filter(sales_return__sale=sale)
        .values("sale_item_id")
        .annotate(total=Sum("quantity"))
    )
    return {str(row["sale_item_id"]): int(row["total"] or 0) for row in rows}


def max_returnable(sale_item, already_returned: int) -> int:
    return max(int(sale_item.quantity) - int(already_returned or 0), 0)


def validate_return_request(sale, items, *, reason: str | None = None, now=None) -> list[ReturnRequestItem]:
    """
    Gate a return request against `sale` and return settlement-ready items.

    product_id and batch_deductions are always taken from the stored sale
    line, never from the request.
    """
    if sale is None or not items:
        raise InvalidReturnRequestError()

    if reason is not None and not reason.strip():
        raise InvalidReturnRequestError("A reason for the return is required")

    if not is_return_eligible(sale.created_at, now):
        raise ReturnWindowExpiredError(
            f"Return period expired (limit: {pos_setting('RETURN_WINDOW_DAYS')} days)"
        )

    sale_items = {str(item.id): item for item in sale.items.all()}
    returned = already_returned_quantities(sale)

    requested: dict[str, int] = defaultdict(int)
    for raw in items:
        sale_item_id = str(raw.get("sale_item_id") or "")
        quantity = raw.get("quantity")

        if sale_item_id not in sale_items:
            raise InvalidReturnRequestError(f"Sale item {sale_item_id or '?'} is not part of this sale")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidReturnRequestError("Return quantity must be a positive whole number")

        requested[sale_item_id] += quantity

    validated: list[ReturnRequestItem] = []
    for sale_item_id, quantity in requested.items():
        sale_item = sale_items[sale_item_id]
        ceiling = max_returnable(sale_item, returned.get(sale_item_id, 0))

        if quantity > ceiling:
            raise ReturnQuantityExceededError(
                f"Cannot return more than sold/remaining quantity ({ceiling}) for {sale_item.product_name}"
            )

        validated.append(
            ReturnRequestItem(
                sale_item_id=sale_item_id,
                product_id=str(sale_item.product_id),
                quantity=quantity,
                batch_deductions=tuple(sale_item.deductions),
            )
        )

    return validated
