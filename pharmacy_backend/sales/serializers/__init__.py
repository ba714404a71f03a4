from .input import CheckoutInputSerializer, ReturnInputSerializer
from .sale import SaleSerializer
from .sale_item import SaleItemSerializer
from .sales_return import ReturnItemSerializer, SalesReturnSerializer

__all__ = [
    "SaleSerializer",
    "SaleItemSerializer",
    "SalesReturnSerializer",
    "ReturnItemSerializer",
    "CheckoutInputSerializer",
    "ReturnInputSerializer",
]
