"""
Cart errors.

Message constants are shared by the remote client, the facade and the
widgets so the same failure always reads the same way to the user.
"""

# Auth errors
ERROR_USER_ID_REQUIRED = "User ID is required to access cart"
ERROR_UNAUTHORIZED = "Unauthorized"

# Cart errors
ERROR_CART_ITEM_NOT_FOUND = "Cart item not found"
ERROR_INVALID_QUANTITY = "Quantity must be a positive integer"
ERROR_OUT_OF_STOCK = "Product out of stock"

# Widget-facing messages
ERROR_ADD_FAILED = "Failed to add to cart"
ERROR_UPDATE_FAILED = "Failed to update quantity"
ERROR_REMOVE_FAILED = "Failed to remove item"
ERROR_CLEAR_FAILED = "Failed to clear cart"
ERROR_LOAD_FAILED = "Failed to load cart"

# Transport errors
ERROR_NETWORK = "Cart service unreachable"
ERROR_INTERNAL = "Internal server error"


class CartServiceError(ValueError):
    """Base error for a cart operation that could not be completed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CartValidationError(CartServiceError):
    """Rejected by business rules (out of stock, bad quantity)."""


class CartItemNotFoundError(CartServiceError):
    """Mutation targeted a line or product that is not in the cart."""


class CartAuthError(CartServiceError):
    """Subject is not allowed to touch the remote cart."""


class CartNetworkError(CartServiceError):
    """Transport failure before the backend answered."""


__all__ = [
    "ERROR_USER_ID_REQUIRED",
    "ERROR_UNAUTHORIZED",
    "ERROR_CART_ITEM_NOT_FOUND",
    "ERROR_INVALID_QUANTITY",
    "ERROR_OUT_OF_STOCK",
    "ERROR_ADD_FAILED",
    "ERROR_UPDATE_FAILED",
    "ERROR_REMOVE_FAILED",
    "ERROR_CLEAR_FAILED",
    "ERROR_LOAD_FAILED",
    "ERROR_NETWORK",
    "ERROR_INTERNAL",
    "CartServiceError",
    "CartValidationError",
    "CartItemNotFoundError",
    "CartAuthError",
    "CartNetworkError",
]
