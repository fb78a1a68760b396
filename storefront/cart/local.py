"""Guest cart persisted in client-side key-value storage."""
import json

from storefront import config
from storefront.logging import get_logger
from storefront.models import LineId, Product
from .models import Cart, CartLine, ProductSnapshot
from .storage import KeyValueStorage

logger = get_logger(__name__)


class LocalCartStore:
    """
    Owns the anonymous cart's durable representation.

    Every operation is synchronous and total: storage failures and corrupt
    data are logged and degrade to a best-effort result instead of raising,
    because widgets call these straight from UI event handlers.

    Usage:
        store = LocalCartStore(MemoryStorage())
        cart = store.add_line(product, quantity=2)
        cart = store.update_line(cart.items[0].line_id, 0)  # removes the line
    """

    def __init__(self, storage: KeyValueStorage, key: str | None = None):
        self.storage = storage
        self.key = key or config.get_guest_cart_key()
        # Line id counter; outlives clear() so ids from a discarded cart never come back
        self.seq_key = f"{self.key}:seq"
        self._next_seq = 1

    def read(self) -> Cart:
        """Persisted guest cart, or an empty cart if missing or unreadable."""
        try:
            raw = self.storage.get(self.key)
        except Exception as e:
            logger.warning(f"Error reading guest cart: {e}", exc_info=True)
            return Cart.empty()

        if not raw:
            return Cart.empty()

        try:
            return Cart.from_dict(json.loads(raw))
        except (KeyError, TypeError, ValueError, ArithmeticError, RecursionError) as e:
            logger.warning(f"Corrupted guest cart data, starting empty: {e}")
            return Cart.empty()

    def write(self, cart: Cart) -> None:
        """Persist the cart; a failed write is logged and the caller keeps its in-memory cart."""
        try:
            self.storage.set(self.key, json.dumps(cart.to_dict()))
        except Exception as e:
            logger.error(f"Error saving guest cart: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove the guest cart. The line id counter is kept."""
        try:
            self.storage.remove(self.key)
        except Exception as e:
            logger.error(f"Error clearing guest cart: {e}", exc_info=True)

    def add_line(self, product: Product, quantity: int = 1) -> Cart:
        """Add product, bumping the existing line for the same product."""
        cart = self.read()
        if quantity < 1:
            return cart

        existing = cart.find_product(product.id)
        if existing:
            existing.quantity += quantity
        else:
            cart.items.append(
                CartLine(
                    line_id=self._next_line_id(cart, product),
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.price,
                    product=ProductSnapshot.from_product(product),
                )
            )

        cart.recalculate_total()
        self.write(cart)
        return cart

    def update_line(self, line_id: LineId, quantity: int) -> Cart:
        """Set a line's quantity; zero or below removes it. Unknown ids leave the cart untouched."""
        cart = self.read()
        line = cart.find_line(line_id)
        if line is None:
            return cart

        if quantity <= 0:
            cart.items.remove(line)
        else:
            line.quantity = quantity

        cart.recalculate_total()
        self.write(cart)
        return cart

    def remove_line(self, line_id: LineId) -> Cart:
        cart = self.read()
        if cart.find_line(line_id) is None:
            return cart

        cart.items = [line for line in cart.items if line.line_id != line_id]
        cart.recalculate_total()
        self.write(cart)
        return cart

    def _read_seq(self) -> int:
        try:
            raw = self.storage.get(self.seq_key)
            return max(int(raw), 1) if raw else 1
        except ValueError:
            logger.warning(f"Ignoring unreadable line counter under {self.seq_key}")
            return 1
        except Exception as e:
            logger.warning(f"Error reading line counter: {e}")
            return 1

    def _next_line_id(self, cart: Cart, product: Product) -> str:
        seq = max(cart.next_line_seq, self._read_seq(), self._next_seq)
        cart.next_line_seq = self._next_seq = seq + 1
        try:
            self.storage.set(self.seq_key, str(seq + 1))
        except Exception as e:
            logger.error(f"Error saving line counter: {e}", exc_info=True)
        return f"guest-{seq}-{product.id}"
