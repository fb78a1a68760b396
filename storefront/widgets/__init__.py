"""Cart-aware widgets."""
from .optimistic import Notifier, log_notifier, run_optimistic
from .base import CartWidget
from .product_tile import ProductTile
from .cart_drawer import CartDrawer
from .header_badge import HeaderBadge

__all__ = [
    "Notifier",
    "log_notifier",
    "run_optimistic",
    "CartWidget",
    "ProductTile",
    "CartDrawer",
    "HeaderBadge",
]
