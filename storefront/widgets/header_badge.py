"""Header cart badge."""
from storefront.cart import Cart
from storefront.errors import CartServiceError
from .base import CartWidget


class HeaderBadge(CartWidget):
    """Number of units in the cart; quietly shows 0 when the cart cannot be read."""

    count = 0

    def render(self, cart: Cart) -> None:
        self.count = cart.total_items

    def on_load_error(self, error: CartServiceError) -> None:
        self.count = 0
