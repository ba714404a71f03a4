# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
- CartItem is a transient value type, exported here so callers import
  every sales shape from one place.
"""

from .cart import CartItem
from .return_item import ReturnItem
from .sale import Sale
from .sale_item import SaleItem
from .sales_return import SalesReturn

__all__ = [
    "CartItem",
    "Sale",
    "SaleItem",
    "SalesReturn",
    "ReturnItem",
]
