"""Client authentication state (in-memory)."""
from typing import Callable, Optional, Protocol

from storefront.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)

SessionListener = Callable[[], None]


class AuthStateProvider(Protocol):
    """What the cart needs to know about the current subject."""

    @property
    def user_id(self) -> Optional[str]: ...

    def is_anonymous(self) -> bool: ...


class AuthSession:
    """
    Current subject of the storefront client.

    Token issuing and refresh happen elsewhere; this only records who is
    signed in and tells interested parties when that changes.
    """

    def __init__(self, user_id: Optional[str] = None, access_token: Optional[str] = None):
        self._user_id = str(user_id) if user_id is not None else None
        self._access_token = access_token
        self._on_sign_in: list[SessionListener] = []
        self._on_sign_out: list[SessionListener] = []

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    def is_anonymous(self) -> bool:
        return self._user_id is None

    def on_sign_in(self, listener: SessionListener) -> None:
        self._on_sign_in.append(listener)

    def on_sign_out(self, listener: SessionListener) -> None:
        self._on_sign_out.append(listener)

    def sign_in(self, user_id: str, access_token: Optional[str] = None) -> None:
        if not user_id:
            raise ValueError("user_id must be a non-empty string")
        self._user_id = str(user_id)
        self._access_token = access_token
        logger.info("Signed in user %s", sanitize_id_for_logging(user_id))
        for listener in list(self._on_sign_in):
            listener()

    def sign_out(self) -> None:
        was_signed_in = self._user_id is not None
        self._user_id = None
        self._access_token = None
        if was_signed_in:
            logger.info("Signed out")
        for listener in list(self._on_sign_out):
            listener()
