"""Cart facade: one call surface over the guest and user carts."""
from storefront.auth import AuthStateProvider
from storefront.errors import (
    ERROR_CART_ITEM_NOT_FOUND,
    ERROR_INVALID_QUANTITY,
    ERROR_USER_ID_REQUIRED,
    CartAuthError,
    CartItemNotFoundError,
    CartServiceError,
    CartValidationError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import LineId, Product, ProductId
from storefront.realtime import CartEventBus
from .backends import CartBackend, GuestCartBackend, UserCartBackend
from .local import LocalCartStore
from .models import Cart
from .remote import RemoteCartClient

logger = get_logger(__name__)


def _validate_quantity(quantity, minimum: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < minimum:
        raise CartValidationError(ERROR_INVALID_QUANTITY)


class CartFacade:
    """
    Single entry point for reading and mutating the current subject's cart.

    Features:
    - Picks the guest or user cart per call from the auth provider
    - Normalizes both to a Cart
    - Publishes the cart changed signal after every successful mutation
    - No optimistic writes here; that is the calling widget's job

    Usage:
        facade = CartFacade(auth, LocalCartStore(storage), RemoteCartClient(), bus)
        cart = await facade.add_item(product, 2)
        cart = await facade.update_item(cart.items[0].line_id, 0)
    """

    def __init__(
        self,
        auth: AuthStateProvider,
        local: LocalCartStore,
        remote: RemoteCartClient,
        events: CartEventBus,
    ):
        self.auth = auth
        self.local = local
        self.remote = remote
        self.events = events

    def _backend(self) -> CartBackend:
        """Resolve the cart variant for the current subject."""
        if self.auth.is_anonymous():
            return GuestCartBackend(self.local)

        user_id = self.auth.user_id
        if not user_id:
            raise CartAuthError(ERROR_USER_ID_REQUIRED)
        return UserCartBackend(self.remote, str(user_id))

    def _changed(self, cart: Cart) -> Cart:
        self.events.emit()
        return cart

    async def get(self) -> Cart:
        return await self._backend().get()

    async def add_item(self, product: Product, quantity: int = 1) -> Cart:
        """Add product to the cart, incrementing its line if already present."""
        _validate_quantity(quantity, 1)
        backend = self._backend()
        cart = await backend.add_item(product, quantity)
        logger.info(
            "Added %s x%s to %s cart",
            sanitize_id_for_logging(product.id),
            quantity,
            "guest" if cart.subject is None else "user",
        )
        return self._changed(cart)

    async def update_item(self, line_id: LineId, quantity: int) -> Cart:
        """Set a line's quantity; zero or below removes the line."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise CartValidationError(ERROR_INVALID_QUANTITY)
        if quantity <= 0:
            return await self.remove_item(line_id)

        backend = self._backend()
        cart = await backend.update_item(line_id, quantity)
        return self._changed(cart)

    async def remove_item(self, line_id: LineId) -> Cart:
        backend = self._backend()
        cart = await backend.remove_item(line_id)
        logger.info("Removed line %s", sanitize_id_for_logging(line_id))
        return self._changed(cart)

    async def clear(self) -> Cart:
        backend = self._backend()
        cart = await backend.clear()
        return self._changed(cart)

    async def increment_item(self, product: Product, step: int = 1) -> Cart:
        """Bump the product's line by step, adding the line if missing."""
        _validate_quantity(step, 1)
        backend = self._backend()
        current = await backend.get()
        existing = current.find_product(product.id)
        if existing is None:
            cart = await backend.add_item(product, step)
        else:
            cart = await backend.update_item(existing.line_id, existing.quantity + step)
        return self._changed(cart)

    async def decrement_item(self, product_id: ProductId) -> Cart:
        """Drop the product's quantity by one, removing the line at zero."""
        backend = self._backend()
        current = await backend.get()
        existing = current.find_product(product_id)
        if existing is None:
            raise CartItemNotFoundError(ERROR_CART_ITEM_NOT_FOUND)

        if existing.quantity <= 1:
            cart = await backend.remove_item(existing.line_id)
        else:
            cart = await backend.update_item(existing.line_id, existing.quantity - 1)
        return self._changed(cart)

    async def quantity_of(self, product_id: ProductId) -> int:
        """Quantity of product in the cart; 0 when the cart cannot be read."""
        try:
            cart = await self.get()
        except CartServiceError as e:
            logger.warning(f"Failed to read cart quantity: {e}")
            return 0
        return cart.quantity_of(product_id)

    async def item_count(self) -> int:
        """Total units in the cart; 0 when the cart cannot be read."""
        try:
            cart = await self.get()
        except CartServiceError as e:
            logger.warning(f"Failed to get cart item count: {e}")
            return 0
        return cart.total_items

    def on_sign_in(self) -> None:
        """Start the signed-in session with no guest cart (guest lines are not merged)."""
        self.local.clear()
        self.events.emit()

    def on_sign_out(self) -> None:
        """Drop the guest cart key so the next anonymous session starts empty."""
        self.local.clear()
        self.events.emit()
