# sales/services/ledger.py

"""
======================================================
PATH: sales/services/ledger.py
======================================================
SALES LEDGER (CALLER-FACING FACADE)

Purpose:
- Holds the caller-visible list of recent sales (read-through cache).
- Runs sale / return settlement and converts every failure into a
  SettlementResult instead of an exception.
- Invalidates the cached list after each successful settlement so the
  next read of .sales reflects it.

Identity is injected as a zero-arg callable so the ledger never reaches
for request or session state itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from django.db import DatabaseError

from products.services.fefo import InsufficientStockError
from sales.conf import pos_setting
from sales.models import Sale, SalesReturn
from sales.services.exceptions import PosError
from sales.services.return_settlement import settle_return
from sales.services.sale_settlement import BatchSource, settle_sale

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    success: bool
    error: str | None = None
    error_kind: str | None = None
    sale: Sale | None = None
    sales_return: SalesReturn | None = None


def recent_sales_queryset():
    return Sale.objects.prefetch_related(
        "items__return_items",
        "returns__return_items",
    ).order_by("-created_at")


class SalesLedger:
    def __init__(
        self,
        identity: Callable[[], str | None] | None = None,
        get_available_batches: BatchSource | None = None,
        fetch_limit: int | None = None,
    ):
        self._identity = identity or (lambda: None)
        self._get_available_batches = get_available_batches
        self._fetch_limit = fetch_limit
        self._sales: list[Sale] | None = None

        self.error: str | None = None
        self.loading = False

    # --------------------------------------------------
    # READ SIDE
    # --------------------------------------------------
    @property
    def sales(self) -> list[Sale]:
        if self._sales is None:
            self.refresh()
        return self._sales

    def refresh(self) -> list[Sale]:
        limit = self._fetch_limit or pos_setting("SALES_FETCH_LIMIT")

        self.loading = True
        try:
            self._sales = list(recent_sales_queryset()[: int(limit)])
            self.error = None
        except DatabaseError as exc:
            logger.exception("Failed to load sales")
            self._sales = []
            self.error = str(exc) or "Failed to load sales"
        finally:
            self.loading = False

        return self._sales

    def invalidate(self) -> None:
        """Drop the cached list; the next read of .sales reloads it."""
        self._sales = None

    def get_sale_by_receipt(self, receipt_number) -> Sale | None:
        if not isinstance(receipt_number, str) or not receipt_number.strip():
            return None

        return recent_sales_queryset().filter(receipt_number=receipt_number.strip()).first()

    # --------------------------------------------------
    # WRITE SIDE
    # --------------------------------------------------
    def process_sale(self, items, payment_method: str, discount=0) -> SettlementResult:
        try:
            sale = settle_sale(
                items=items,
                payment_method=payment_method,
                get_available_batches=self._get_available_batches,
                cashier_id=self._identity(),
                discount=discount,
            )
        except (PosError, InsufficientStockError, ValueError) as exc:
            logger.warning("Sale rejected: %s", exc)
            return SettlementResult(success=False, error=str(exc), error_kind=exc.__class__.__name__)
        except Exception as exc:
            logger.exception("Unexpected failure while settling sale")
            return SettlementResult(
                success=False,
                error=str(exc) or exc.__class__.__name__,
                error_kind=exc.__class__.__name__,
            )

        self.invalidate()
        return SettlementResult(success=True, sale=sale)

    def process_return(self, sale_id, items, reason: str) -> SettlementResult:
        try:
            sales_return = settle_return(
                sale_id=sale_id,
                items=items,
                reason=reason,
                returned_by=self._identity(),
            )
        except PosError as exc:
            logger.warning("Return rejected for sale %s: %s", sale_id, exc)
            return SettlementResult(success=False, error=str(exc), error_kind=exc.__class__.__name__)
        except Exception as exc:
            logger.exception("Unexpected failure while settling return for sale %s", sale_id)
            return SettlementResult(
                success=False,
                error=str(exc) or exc.__class__.__name__,
                error_kind=exc.__class__.__name__,
            )

        self.invalidate()
        return SettlementResult(success=True, sales_return=sales_return)
