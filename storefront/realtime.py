"""Cart change notifications.

A payload-less "cart changed" signal. Publishers never send cart data;
subscribers re-read the cart through the facade when the signal fires.
Signals emitted with no subscribers are dropped (no buffering, no replay),
so a widget created after a mutation does its own initial read.
"""

from typing import Callable

from storefront.logging import get_logger

logger = get_logger(__name__)

CartChangedListener = Callable[[], None]
Unsubscribe = Callable[[], None]


class _Subscription:
    __slots__ = ("listener", "active")

    def __init__(self, listener: CartChangedListener):
        self.listener = listener
        self.active = True


class CartEventBus:
    """In-process publish/subscribe channel for the cart changed signal.

    One instance is created by the composition root and shared by the facade
    and every widget.
    """

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []

    @property
    def listener_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: CartChangedListener) -> Unsubscribe:
        """Register a zero-argument callback.

        Returns:
            Function that removes this registration; calling it again is a no-op.
        """
        subscription = _Subscription(listener)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if not subscription.active:
                return
            subscription.active = False
            self._subscriptions.remove(subscription)

        return unsubscribe

    def emit(self) -> None:
        """Invoke every listener registered at call time, in registration order.

        Listeners removed mid-emit still run for this signal. A failing listener
        is logged and the remaining listeners are still called.
        """
        for subscription in list(self._subscriptions):
            try:
                subscription.listener()
            except Exception as e:
                logger.warning(f"Cart changed listener failed: {e}", exc_info=True)
