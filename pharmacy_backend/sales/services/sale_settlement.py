# sales/services/sale_settlement.py

"""
======================================================
PATH: sales/services/sale_settlement.py
======================================================
SALE SETTLEMENT (CART -> SALE)

SINGLE SOURCE OF TRUTH for:
- Sale + SaleItem creation
- FEFO batch allocation per line
- Stock deduction per batch

Order of work:
1. Every cart line must carry a product id and name.
2. Every line is allocated (FEFO) BEFORE anything is written; lines for
   the same product see what earlier lines already claimed.
3. Receipt number, Sale row, SaleItem rows (with deduction ledgers).
4. Deductions summed per batch, written once per batch.

The whole procedure is one database transaction: any failure after the
first write rolls back the Sale, its items and every stock change.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Iterable

from django.db import DatabaseError, transaction

from products.services.batches import apply_quantity_deltas, available_batches_for_product
from products.services.fefo import BatchDeduction, allocate_fefo, normalize_batch
from sales.models import CartItem, Sale, SaleItem
from sales.services.exceptions import InvalidCartItemError, PersistenceFailure
from sales.services.receipt_numbers import next_sale_receipt_number

logger = logging.getLogger(__name__)

BatchSource = Callable[[str], Iterable]


def _plan_allocations(
    items: list[CartItem],
    get_available_batches: BatchSource,
) -> list[list[BatchDeduction]]:
    plans = []
    consumed: dict[str, int] = defaultdict(int)

    for item in items:
        # Earlier lines of this cart have already claimed part of each batch.
        batches = [
            replace(batch, quantity=batch.quantity - consumed[batch.id])
            for batch in map(normalize_batch, get_available_batches(item.product_id) or [])
        ]
        plan = allocate_fefo(
            quantity=item.quantity,
            batches=batches,
            product_name=item.product_name,
        )
        for deduction in plan:
            consumed[deduction.batch_id] += deduction.quantity
        plans.append(plan)

    return plans


def _sum_deductions(plans: list[list[BatchDeduction]]) -> dict[str, int]:
    deltas: dict[str, int] = defaultdict(int)
    for plan in plans:
        for deduction in plan:
            deltas[deduction.batch_id] -= deduction.quantity
    return dict(deltas)


def settle_sale(
    *,
    items,
    payment_method: str,
    get_available_batches: BatchSource | None = None,
    cashier_id: str | None = None,
    discount=0,
) -> Sale:
    """
    Settle a cart into a persisted Sale.

    Raises:
    - InvalidCartItemError: a line lacks product id / name
    - InsufficientStockError: a line cannot be covered by available batches
    - PersistenceFailure: the database rejected a write
    """
    cart = [CartItem.coerce(item) for item in (items or [])]

    if any(not item.is_identified for item in cart):
        raise InvalidCartItemError()

    get_available_batches = get_available_batches or available_batches_for_product

    # Validate-all-before-write.
    plans = _plan_allocations(cart, get_available_batches)

    try:
        with transaction.atomic():
            sale = Sale.objects.create(
                receipt_number=next_sale_receipt_number(),
                total=sum((Decimal(item.total) for item in cart), Decimal("0.00")),
                discount=Decimal(str(discount or 0)),
                payment_method=payment_method,
                cashier_id=cashier_id,
            )

            SaleItem.objects.bulk_create(
                [
                    SaleItem(
                        sale=sale,
                        product_id=item.product_id,
                        product_name=item.product_name,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        total=item.total,
                        position=position,
                        batch_deductions=[d.as_dict() for d in plan],
                    )
                    for position, (item, plan) in enumerate(zip(cart, plans))
                ]
            )

            apply_quantity_deltas(_sum_deductions(plans))
    except DatabaseError as exc:
        logger.exception("Sale settlement failed while writing")
        raise PersistenceFailure(str(exc)) from exc

    logger.info(
        "Sale %s settled: %s line(s), total %s, cashier %s",
        sale.receipt_number,
        len(cart),
        sale.total,
        cashier_id,
    )
    return sale
