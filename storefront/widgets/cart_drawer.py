"""Cart drawer: the full line list with per-line controls and the bill summary."""
from decimal import Decimal
from typing import Awaitable, Callable, Hashable

from storefront.cart import Cart, CartFacade
from storefront.errors import ERROR_CLEAR_FAILED, ERROR_REMOVE_FAILED, ERROR_UPDATE_FAILED
from storefront.models import LineId
from storefront.realtime import CartEventBus
from storefront.services.money import format_money
from .base import CartWidget
from .optimistic import Notifier, log_notifier, run_optimistic

DELIVERY_FEE = Decimal("0")
HANDLING_CHARGE = Decimal("5")


class CartDrawer(CartWidget):
    """
    Editable view of every line in the cart.

    Each edit patches a copy of the displayed cart right away and rolls back
    to the copy captured before the edit if the facade call fails. Edits on a
    line that already has one in flight are ignored.
    """

    def __init__(
        self,
        facade: CartFacade,
        events: CartEventBus,
        notify: Notifier = log_notifier,
        currency: str = "INR",
    ):
        super().__init__(facade, events, notify)
        self.cart = Cart.empty()
        self.currency = currency
        self.busy_lines: set[Hashable] = set()

    def render(self, cart: Cart) -> None:
        self.cart = cart

    # Bill summary

    @property
    def subtotal(self) -> Decimal:
        return self.cart.total_amount

    @property
    def delivery_fee(self) -> Decimal:
        return DELIVERY_FEE

    @property
    def handling_charge(self) -> Decimal:
        return HANDLING_CHARGE if self.subtotal > 0 else Decimal("0")

    @property
    def grand_total(self) -> Decimal:
        return self.subtotal + self.delivery_fee + self.handling_charge

    def summary(self) -> dict[str, str]:
        return {
            "subtotal": format_money(self.subtotal, self.currency),
            "delivery_fee": format_money(self.delivery_fee, self.currency),
            "handling_charge": format_money(self.handling_charge, self.currency),
            "grand_total": format_money(self.grand_total, self.currency),
        }

    # Line controls

    def can_increment(self, line_id: LineId) -> bool:
        line = self.cart.find_line(line_id)
        if line is None or line_id in self.busy_lines:
            return False
        return line.stock is None or line.quantity < line.stock

    async def increment(self, line_id: LineId) -> bool:
        if not self.can_increment(line_id):
            return False
        line = self.cart.find_line(line_id)
        new_quantity = line.quantity + 1
        return await self._mutate(
            line_id,
            self._with_quantity(line_id, new_quantity),
            lambda: self.facade.update_item(line_id, new_quantity),
            ERROR_UPDATE_FAILED,
        )

    async def decrement(self, line_id: LineId) -> bool:
        line = self.cart.find_line(line_id)
        if line is None or line_id in self.busy_lines:
            return False
        if line.quantity <= 1:
            return await self.remove(line_id)

        new_quantity = line.quantity - 1
        return await self._mutate(
            line_id,
            self._with_quantity(line_id, new_quantity),
            lambda: self.facade.update_item(line_id, new_quantity),
            ERROR_UPDATE_FAILED,
        )

    async def remove(self, line_id: LineId) -> bool:
        if self.cart.find_line(line_id) is None or line_id in self.busy_lines:
            return False
        guess = self.cart.copy()
        guess.items = [line for line in guess.items if line.line_id != line_id]
        guess.recalculate_total()
        return await self._mutate(
            line_id,
            guess,
            lambda: self.facade.remove_item(line_id),
            ERROR_REMOVE_FAILED,
            success_message="Item removed from cart",
        )

    async def clear(self) -> bool:
        if self.cart.is_empty or self.busy_lines:
            return False
        return await self._mutate(
            "*",
            Cart.empty(self.cart.subject),
            self.facade.clear,
            ERROR_CLEAR_FAILED,
            success_message="Cart cleared",
        )

    def _with_quantity(self, line_id: LineId, quantity: int) -> Cart:
        guess = self.cart.copy()
        guess.find_line(line_id).quantity = quantity
        guess.recalculate_total()
        return guess

    async def _mutate(
        self,
        busy_key: Hashable,
        guess: Cart,
        action: Callable[[], Awaitable[Cart]],
        failure_message: str,
        success_message: str | None = None,
    ) -> bool:
        previous = self.cart

        def apply() -> None:
            self.cart = guess

        def revert() -> None:
            self.cart = previous

        self.busy_lines.add(busy_key)
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
            self.busy_lines.discard(busy_key)

        if cart is None:
            return False
        self.apply_cart(cart)
        if success_message:
            self.notify(success_message, "success")
        return True
