"""Cart package: models, guest store, remote client, and facade."""
from .models import CartLine, Cart, ProductSnapshot
from .local import LocalCartStore
from .remote import RemoteCartClient
from .backends import CartBackend, GuestCartBackend, UserCartBackend
from .service import CartFacade

__all__ = [
    "CartLine",
    "Cart",
    "ProductSnapshot",
    "LocalCartStore",
    "RemoteCartClient",
    "CartBackend",
    "GuestCartBackend",
    "UserCartBackend",
    "CartFacade",
]
