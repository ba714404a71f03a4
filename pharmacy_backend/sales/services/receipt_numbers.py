# sales/services/receipt_numbers.py

"""
RECEIPT NUMBERING

Sale receipts:   PREFIX-00001, PREFIX-00002, ...
Return receipts: RET-YYYYMMDD-NNNNNN (last 6 digits of epoch milliseconds)

Sale numbering is best-effort sequential: the next number is derived from
the most recent receipt carrying the prefix. Two tills settling at the same
instant can compute the same number; the unique constraint on
Sale.receipt_number then rejects the second write.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone as dt_timezone

from django.db import DatabaseError, transaction
from django.utils import timezone

from sales.conf import pos_setting
from sales.models import Sale

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 5
_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


def _epoch_millis(now: datetime) -> str:
    return str(int(now.timestamp() * 1000))


def parse_receipt_sequence(receipt_number: str | None, prefix: str) -> int | None:
    """
    Sequence number of an existing receipt, or None if it cannot be parsed.

    The prefix may itself contain "-"; only the part after "PREFIX-" is
    parsed, and it must not contain a further separator.
    """
    if not receipt_number:
        return None

    head = f"{prefix}-"
    if not receipt_number.lower().startswith(head.lower()):
        return None

    suffix = receipt_number[len(head):]
    if "-" in suffix:
        return None

    match = _LEADING_DIGITS.match(suffix)
    if not match:
        return None
    return int(match.group(1))


def format_sale_receipt(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:0{SEQUENCE_WIDTH}d}"


def fallback_sale_receipt(prefix: str, now: datetime | None = None) -> str:
    now = now or timezone.now()
    return f"{prefix}-{_epoch_millis(now)[-SEQUENCE_WIDTH:]}"


def next_sale_receipt_number(*, prefix: str | None = None, now: datetime | None = None) -> str:
    prefix = prefix or pos_setting("RECEIPT_PREFIX")

    try:
        # Savepoint: a failed lookup must not poison the caller's transaction.
        with transaction.atomic():
            latest = (
                Sale.objects.filter(receipt_number__istartswith=f"{prefix}-")
                .order_by("-created_at")
                .values_list("receipt_number", flat=True)
                .first()
            )
    except DatabaseError:
        logger.warning("Receipt number lookup failed; using timestamp fallback", exc_info=True)
        return fallback_sale_receipt(prefix, now)

    last = parse_receipt_sequence(latest, prefix)
    return format_sale_receipt(prefix, (last or 0) + 1)


def return_receipt_number(*, prefix: str | None = None, now: datetime | None = None) -> str:
    prefix = prefix or pos_setting("RETURN_RECEIPT_PREFIX")
    now = now or timezone.now()

    day = now.astimezone(dt_timezone.utc).strftime("%Y%m%d")
    return f"{prefix}-{day}-{_epoch_millis(now)[-6:]}"
