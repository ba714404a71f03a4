# products/serializers/__init__.py

from .product import ProductSerializer
from .stock_batch import AvailableBatchSerializer, StockBatchSerializer

__all__ = [
    "AvailableBatchSerializer",
    "ProductSerializer",
    "StockBatchSerializer",
]
