"""Authentication state used by the cart."""
from .session import AuthSession, AuthStateProvider

__all__ = ["AuthSession", "AuthStateProvider"]
