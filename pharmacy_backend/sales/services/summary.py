# sales/services/summary.py

"""
SALES SUMMARY (REPORT STATISTICS)

All figures are net of returns:
- refund   = unit_price x returned quantity, taken off revenue
- profit   = (unit_price - cost) x quantity, returned units taken off
- cost     = cost_price of the FIRST batch in the line's deduction ledger
             (0 when the line has no ledger or the batch is gone)

Sales are expected with items and returns__return_items prefetched.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable

from django.utils import timezone

from products.models import StockBatch

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class SalesSummary:
    total_revenue: Decimal
    total_transactions: int
    avg_transaction: Decimal
    total_items: int
    total_profit: Decimal

    def as_dict(self) -> dict:
        return asdict(self)


def _local_day(value: datetime) -> date:
    if timezone.is_aware(value):
        return timezone.localtime(value).date()
    return value.date()


def filter_sales_by_date(sales: Iterable, date_from: date | None = None, date_to: date | None = None) -> list:
    """Sales whose local creation day lies in [date_from, date_to], newest first."""
    out = []
    for sale in sales:
        created = getattr(sale, "created_at", None)
        if created is None:
            continue

        day = _local_day(created)
        if date_from and day < date_from:
            continue
        if date_to and day > date_to:
            continue
        out.append(sale)

    return sorted(out, key=lambda s: s.created_at, reverse=True)


def _first_batch_id(sale_item) -> str | None:
    deductions = sale_item.deductions
    if not deductions:
        return None
    return deductions[0].batch_id or None


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def batch_cost_lookup(sales: list) -> Callable[[str | None], Decimal]:
    batch_ids = set()
    for sale in sales:
        for item in sale.items.all():
            batch_id = _first_batch_id(item)
            if batch_id and _is_uuid(batch_id):
                batch_ids.add(batch_id)

    costs: dict[str, Decimal] = {}
    if batch_ids:
        rows = StockBatch.objects.filter(id__in=batch_ids).values_list("id", "cost_price")
        costs = {str(pk): Decimal(cost) for pk, cost in rows}

    def cost_of(batch_id: str | None) -> Decimal:
        if not batch_id:
            return ZERO
        return costs.get(str(batch_id), ZERO)

    return cost_of


def summarize_sales(sales: Iterable, cost_lookup: Callable[[str | None], Decimal] | None = None) -> SalesSummary:
    sales = list(sales)
    cost_of = cost_lookup or batch_cost_lookup(sales)

    revenue = ZERO
    profit = ZERO
    items_count = 0

    for sale in sales:
        revenue += Decimal(sale.total or 0)

        lines = {str(item.id): item for item in sale.items.all()}
        for item in lines.values():
            unit_margin = Decimal(item.unit_price) - cost_of(_first_batch_id(item))
            profit += unit_margin * item.quantity
            items_count += int(item.quantity)

        for sales_return in sale.returns.all():
            for returned in sales_return.return_items.all():
                original = lines.get(str(returned.sale_item_id))
                if original is None:
                    continue

                unit_margin = Decimal(original.unit_price) - cost_of(_first_batch_id(original))
                revenue -= Decimal(original.unit_price) * returned.quantity
                profit -= unit_margin * returned.quantity
                items_count -= int(returned.quantity)

    transactions = len(sales)
    average = (revenue / transactions).quantize(Decimal("0.01")) if transactions else ZERO

    return SalesSummary(
        total_revenue=revenue,
        total_transactions=transactions,
        avg_transaction=average,
        total_items=items_count,
        total_profit=profit,
    )
