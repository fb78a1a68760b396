"""Base class for widgets that mirror the cart."""
import asyncio
from typing import Callable, Optional

from storefront.cart import Cart, CartFacade
from storefront.errors import ERROR_LOAD_FAILED, CartServiceError
from storefront.logging import get_logger
from storefront.realtime import CartEventBus
from .optimistic import Notifier, log_notifier

logger = get_logger(__name__)


class CartWidget:
    """
    Keeps its own view of the cart in sync through the facade and the bus.

    mount() subscribes to the cart changed signal and loads the cart; every
    signal schedules a re-read on the running loop. Reads that settle after a
    newer read started, or after unmount(), are dropped.
    """

    def __init__(self, facade: CartFacade, events: CartEventBus, notify: Notifier = log_notifier):
        self.facade = facade
        self.events = events
        self.notify = notify
        self.mounted = False
        self.disposed = False
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending: set[asyncio.Task] = set()
        self._version = 0

    def render(self, cart: Cart) -> None:
        raise NotImplementedError

    def on_load_error(self, error: CartServiceError) -> None:
        self.notify(ERROR_LOAD_FAILED, "error")

    def is_active(self) -> bool:
        return not self.disposed

    def _next_version(self) -> int:
        self._version += 1
        return self._version

    def apply_cart(self, cart: Cart) -> None:
        """Render a cart returned by a mutation; in-flight reads become stale."""
        self._next_version()
        self.render(cart)

    async def mount(self) -> None:
        if self.mounted:
            return
        self.mounted = True
        self.disposed = False
        self._unsubscribe = self.events.subscribe(self._on_cart_changed)
        await self.refresh()

    def unmount(self) -> None:
        self.mounted = False
        self.disposed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def refresh(self) -> None:
        """Re-read the cart and render it unless a newer read or teardown intervened."""
        version = self._next_version()
        try:
            cart = await self.facade.get()
        except CartServiceError as e:
            if self.is_active() and version == self._version:
                logger.warning(f"{type(self).__name__} failed to load cart: {e}")
                self.on_load_error(e)
            return
        except Exception:
            logger.exception(f"{type(self).__name__} failed to load cart")
            return

        if not self.is_active() or version != self._version:
            return
        self.render(cart)

    def _on_cart_changed(self) -> None:
        if not self.mounted:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Cart changed outside an event loop; %s not refreshed", type(self).__name__)
            return
        task = loop.create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for scheduled re-reads to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
