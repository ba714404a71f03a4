# products/services/search.py

"""
PRODUCT SEARCH

A purely numeric term is treated as a barcode scan; anything else is
matched against the product name and its salt formula.
"""

from __future__ import annotations

import re

from django.db.models import Q, QuerySet

from products.models import Product

_DIGITS = re.compile(r"^\d+$")


def is_numeric(term: str) -> bool:
    return bool(_DIGITS.match(term or ""))


def matches_search(product, term: str | None) -> bool:
    if product is None:
        return False
    if not term or not term.strip():
        return True

    needle = term.strip().lower()

    if is_numeric(needle):
        return needle in (getattr(product, "barcode", None) or "").lower()

    name = (getattr(product, "name", None) or "").lower()
    salt = (getattr(product, "salt_formula", None) or "").lower()
    return needle in name or needle in salt


def search_products(term: str | None, queryset: QuerySet | None = None) -> QuerySet:
    """ORM counterpart of matches_search()."""
    qs = queryset if queryset is not None else Product.objects.all()

    needle = (term or "").strip()
    if not needle:
        return qs

    if is_numeric(needle):
        return qs.filter(barcode__icontains=needle)

    return qs.filter(Q(name__icontains=needle) | Q(salt_formula__icontains=needle))
