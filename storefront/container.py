"""Composition root: one bus, one store, one client, one facade per storefront."""
from dataclasses import dataclass
from typing import Optional

import httpx

from storefront import config
from storefront.auth import AuthSession
from storefront.cart import CartFacade, LocalCartStore, RemoteCartClient
from storefront.db import KeyValueStorage, create_storage
from storefront.logging import get_logger
from storefront.models import Product
from storefront.realtime import CartEventBus
from storefront.widgets import CartDrawer, HeaderBadge, Notifier, ProductTile, log_notifier

logger = get_logger(__name__)


@dataclass
class Storefront:
    """Wired cart subsystem shared by every widget on the page."""

    auth: AuthSession
    events: CartEventBus
    storage: KeyValueStorage
    local: LocalCartStore
    remote: RemoteCartClient
    facade: CartFacade

    def product_tile(self, product: Product, notify: Notifier = log_notifier) -> ProductTile:
        return ProductTile(product, self.facade, self.events, notify)

    def cart_drawer(self, notify: Notifier = log_notifier) -> CartDrawer:
        return CartDrawer(self.facade, self.events, notify, currency=config.get_currency())

    def header_badge(self, notify: Notifier = log_notifier) -> HeaderBadge:
        return HeaderBadge(self.facade, self.events, notify)

    async def aclose(self) -> None:
        await self.remote.aclose()


def create_storefront(
    auth: Optional[AuthSession] = None,
    storage: Optional[KeyValueStorage] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    base_url: Optional[str] = None,
) -> Storefront:
    """Build and wire the cart subsystem.

    Args:
        auth: Session to follow; a fresh anonymous session by default
        storage: Guest cart storage; built from CART_STORAGE_BACKEND by default
        http_client: Injected httpx client (tests use MockTransport)
        base_url: Backend API root; STOREFRONT_API_URL by default
    """
    auth = auth or AuthSession()
    storage = storage if storage is not None else create_storage()
    events = CartEventBus()
    local = LocalCartStore(storage)
    remote = RemoteCartClient(
        base_url=base_url,
        http_client=http_client,
        token_getter=lambda: auth.access_token,
    )
    facade = CartFacade(auth, local, remote, events)

    auth.on_sign_in(facade.on_sign_in)
    auth.on_sign_out(facade.on_sign_out)

    logger.debug("Storefront created (api=%s)", remote.base_url)
    return Storefront(
        auth=auth,
        events=events,
        storage=storage,
        local=local,
        remote=remote,
        facade=facade,
    )


# Singleton instance
_storefront: Optional[Storefront] = None


def get_storefront() -> Storefront:
    """Get Storefront singleton."""
    global _storefront
    if _storefront is None:
        _storefront = create_storefront()
    return _storefront


async def close_storefront() -> None:
    """Close the singleton's HTTP client and drop it."""
    global _storefront
    if _storefront is not None:
        await _storefront.aclose()
        _storefront = None
