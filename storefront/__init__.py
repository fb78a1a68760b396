"""
Storefront cart consistency subsystem

- cart: guest store, remote client, facade
- realtime: cart changed bus
- widgets: product tile, cart drawer, header badge
- container: composition root

Note: Imports are lazy so that importing storefront.logging or
storefront.config does not pull in the whole package.
"""

__all__ = [
    "Storefront",
    "create_storefront",
    "get_storefront",
    "close_storefront",
]


def __getattr__(name):
    """Lazy attribute access for the composition root."""
    if name in __all__:
        from storefront import container

        return getattr(container, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
