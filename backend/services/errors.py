"""
Domain errors raised by the cart and order services.

Routes translate these into HTTP responses; services never raise HTTPException.
"""
from typing import List


class HarvestHubError(Exception):
    """Base class for all domain errors."""


class StoreUnavailableError(HarvestHubError):
    """The database could not be reached or rejected the request."""

    def __init__(self, message: str = "Something went wrong. Please try again later."):
        super().__init__(message)


class OrderNotFoundError(HarvestHubError):
    def __init__(self, key=None):
        self.key = key
        super().__init__("Order not found")


class EmptyCartError(HarvestHubError):
    def __init__(self):
        super().__init__("Your cart is empty")


class ProductsUnavailableError(HarvestHubError):
    def __init__(self, names: List[str]):
        self.names = list(names)
        super().__init__(
            "Some products in your cart are no longer available: " + ", ".join(self.names)
        )


class OrderCreationError(HarvestHubError):
    def __init__(self, message: str = "Failed to place order. Please try again."):
        super().__init__(message)


class OrderItemsCreationError(HarvestHubError):
    """Items insert failed after the header was written; the header is rolled back."""

    def __init__(self, message: str = "Failed to place order. Please try again."):
        super().__init__(message)
