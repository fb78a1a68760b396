"""The two cart variants behind the facade: guest (local) and user (remote)."""
from typing import Protocol

from storefront.models import LineId, Product
from .local import LocalCartStore
from .models import Cart
from .remote import RemoteCartClient


class CartBackend(Protocol):
    """Cart capability the facade delegates to."""

    async def get(self) -> Cart: ...

    async def add_item(self, product: Product, quantity: int) -> Cart: ...

    async def update_item(self, line_id: LineId, quantity: int) -> Cart: ...

    async def remove_item(self, line_id: LineId) -> Cart: ...

    async def clear(self) -> Cart: ...


class GuestCartBackend:
    """Anonymous cart in local storage. Never suspends, never raises."""

    def __init__(self, store: LocalCartStore):
        self.store = store

    async def get(self) -> Cart:
        return self.store.read()

    async def add_item(self, product: Product, quantity: int) -> Cart:
        return self.store.add_line(product, quantity)

    async def update_item(self, line_id: LineId, quantity: int) -> Cart:
        return self.store.update_line(line_id, quantity)

    async def remove_item(self, line_id: LineId) -> Cart:
        return self.store.remove_line(line_id)

    async def clear(self) -> Cart:
        self.store.clear()
        return Cart.empty()


class UserCartBackend:
    """Server cart of one authenticated user."""

    def __init__(self, client: RemoteCartClient, user_id: str):
        self.client = client
        self.user_id = user_id

    async def get(self) -> Cart:
        return await self.client.fetch(self.user_id)

    async def add_item(self, product: Product, quantity: int) -> Cart:
        return await self.client.add_line(self.user_id, product.id, quantity)

    async def update_item(self, line_id: LineId, quantity: int) -> Cart:
        return await self.client.update_line(line_id, quantity, user_id=self.user_id)

    async def remove_item(self, line_id: LineId) -> Cart:
        return await self.client.remove_line(self.user_id, line_id)

    async def clear(self) -> Cart:
        return await self.client.clear(self.user_id)
