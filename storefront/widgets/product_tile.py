"""Product tile: add / + / - controls for a single catalog product."""
from typing import Awaitable, Callable

from storefront.cart import Cart, CartFacade
from storefront.errors import ERROR_ADD_FAILED, ERROR_OUT_OF_STOCK, ERROR_UPDATE_FAILED
from storefront.models import LineId, Product
from storefront.realtime import CartEventBus
from .base import CartWidget
from .optimistic import Notifier, log_notifier, run_optimistic


class ProductTile(CartWidget):
    """
    Shows how many units of one product are in the cart.

    The displayed counter moves immediately on click and is re-synced to the
    cart the facade returns; a failed call puts the counter back and shows an
    error. Increment stops at the product's stock, decrement at 1 removes the
    line.
    """

    def __init__(
        self,
        product: Product,
        facade: CartFacade,
        events: CartEventBus,
        notify: Notifier = log_notifier,
    ):
        super().__init__(facade, events, notify)
        self.product = product
        self.quantity = 0
        self.line_id: LineId | None = None
        self.busy = False

    def render(self, cart: Cart) -> None:
        line = cart.find_product(self.product.id)
        self.quantity = line.quantity if line else 0
        self.line_id = line.line_id if line else None

    @property
    def can_add(self) -> bool:
        return not self.busy and self.product.in_stock and self.quantity == 0

    @property
    def can_increment(self) -> bool:
        return not self.busy and self.quantity < self.product.stock

    @property
    def can_decrement(self) -> bool:
        return not self.busy and self.quantity > 0

    async def add(self) -> bool:
        if not self.can_add:
            if not self.busy and not self.product.in_stock:
                self.notify(ERROR_OUT_OF_STOCK, "error")
            return False
        return await self._mutate(
            1,
            lambda: self.facade.add_item(self.product, 1),
            ERROR_ADD_FAILED,
            success_message=f"Added {self.product.name} to cart",
        )

    async def increment(self) -> bool:
        if not self.can_increment:
            return False
        return await self._mutate(
            self.quantity + 1,
            lambda: self.facade.increment_item(self.product),
            ERROR_UPDATE_FAILED,
        )

    async def decrement(self) -> bool:
        if not self.can_decrement:
            return False
        new_quantity = self.quantity - 1
        return await self._mutate(
            new_quantity,
            lambda: self.facade.decrement_item(self.product.id),
            ERROR_UPDATE_FAILED,
            success_message="Item removed from cart" if new_quantity == 0 else None,
        )

    async def _mutate(
        self,
        guess: int,
        action: Callable[[], Awaitable[Cart]],
        failure_message: str,
        success_message: str | None = None,
    ) -> bool:
        previous_quantity, previous_line_id = self.quantity, self.line_id

        def apply() -> None:
            self.quantity = guess

        def revert() -> None:
            self.quantity = previous_quantity
            self.line_id = previous_line_id

        self.busy = True
        try:
            cart = await run_optimistic(
                apply,
                revert,
                action,
                notify=self.notify,
                failure_message=failure_message,
                is_active=self.is_active,
            )
        finally:
            self.busy = False

        if cart is None:
            return False
        self.apply_cart(cart)
        if success_message:
            self.notify(success_message, "success" if self.quantity else "info")
        return True
