from .batches import apply_quantity_deltas, available_batches_for_product
from .fefo import AvailableBatch, BatchDeduction, InsufficientStockError, allocate_fefo

__all__ = [
    "AvailableBatch",
    "BatchDeduction",
    "InsufficientStockError",
    "allocate_fefo",
    "apply_quantity_deltas",
    "available_batches_for_product",
]
