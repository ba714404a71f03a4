# products/views/__init__.py

"""
Products views package exports (router imports).
"""

from .product import ProductViewSet
from .stock_batch import StockBatchViewSet

__all__ = [
    "ProductViewSet",
    "StockBatchViewSet",
]
