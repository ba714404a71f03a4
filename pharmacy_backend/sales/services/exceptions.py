# sales/services/exceptions.py

"""
SALES SERVICE ERRORS

Centralized domain errors for sale / return settlement.

Stock shortfalls are raised by products.services.fefo.InsufficientStockError
(the allocation layer owns that error).
"""


class PosError(Exception):
    """Base exception for all POS settlement failures."""


class InvalidCartItemError(PosError):
    """Raised when a cart line lacks a product identity or display name."""

    def __init__(self, message: str = "Invalid cart item"):
        super().__init__(message)


class InvalidReturnRequestError(PosError):
    """Raised when a return request is structurally invalid."""

    def __init__(self, message: str = "Invalid return request"):
        super().__init__(message)


class ReturnWindowExpiredError(InvalidReturnRequestError):
    """Raised when the sale is older than the return window."""


class ReturnQuantityExceededError(InvalidReturnRequestError):
    """Raised when a return would exceed the quantity still returnable."""


class PersistenceFailure(PosError):
    """Wraps a storage-layer failure during settlement."""
