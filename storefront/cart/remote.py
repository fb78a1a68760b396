"""Cart REST client for authenticated users."""
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from storefront import config
from storefront.errors import (
    ERROR_CART_ITEM_NOT_FOUND,
    ERROR_INTERNAL,
    ERROR_NETWORK,
    ERROR_UNAUTHORIZED,
    CartAuthError,
    CartItemNotFoundError,
    CartNetworkError,
    CartServiceError,
    CartValidationError,
)
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import ErrorPayload, LineId, ProductId, RemoteCartPayload
from .models import Cart, CartLine, ProductSnapshot

logger = get_logger(__name__)

TokenGetter = Callable[[], Optional[str]]


class RemoteCartClient:
    """
    Issues cart operations against the backend for an identified user.

    Holds no cart state. A missing or server-failed cart on fetch reads as an
    empty cart; every other failure is raised as a CartServiceError subclass
    carrying the backend's message.

    Endpoints:
        GET    /cart/{userId}
        POST   /cart/items           {userId, productId, quantity}
        PUT    /cart/items/{lineId}  {quantity}
        DELETE /cart/items/{lineId}  {userId}
        DELETE /cart/{userId}
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        token_getter: Optional[TokenGetter] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or config.get_api_url()).rstrip("/")
        self.timeout = timeout or config.get_api_timeout()
        self._token_getter = token_getter

        # HTTP client (lazy init unless injected)
        self._http_client: httpx.AsyncClient | None = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        token = self._token_getter() if self._token_getter else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self, method: str, path: str, action: str, json: Optional[dict[str, Any]] = None
    ) -> httpx.Response:
        client = await self._get_http_client()
        try:
            response = await client.request(
                method, f"{self.base_url}{path}", headers=self._headers(), json=json
            )
        except httpx.RequestError as e:
            logger.warning("Cart %s network error: %s", action, e)
            raise CartNetworkError(f"{ERROR_NETWORK}: {e!s}") from e

        logger.debug("Cart %s %s %s -> %s", action, method, path, response.status_code)
        return response

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            detail = ErrorPayload.model_validate(response.json()).detail
        except (ValueError, ValidationError):
            detail = None
        return detail or response.text[:200] or response.reason_phrase

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return

        status = response.status_code
        detail = self._error_detail(response)
        logger.error("Cart %s failed with %s: %s", action, status, detail)

        if status in (401, 403):
            raise CartAuthError(detail or ERROR_UNAUTHORIZED, status)
        if status == 404:
            raise CartItemNotFoundError(detail or ERROR_CART_ITEM_NOT_FOUND, status)
        if 400 <= status < 500:
            raise CartValidationError(detail, status)
        raise CartServiceError(detail or ERROR_INTERNAL, status)

    @staticmethod
    def _parse_cart(response: httpx.Response, subject: Optional[str]) -> Cart:
        try:
            payload = RemoteCartPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Malformed cart response (%s): %s", response.status_code, e)
            raise CartServiceError(f"Malformed cart response: {e}", response.status_code) from e
        return _to_cart(payload, subject)

    async def _cart_from_mutation(
        self, response: httpx.Response, user_id: Optional[str], action: str
    ) -> Cart:
        """Server cart from a mutation response, re-fetching when the body is empty."""
        self._raise_for_status(response, action)
        if response.content:
            return self._parse_cart(response, user_id)
        if user_id is None:
            raise CartServiceError(f"Empty response to cart {action}", response.status_code)
        return await self.fetch(user_id)

    async def fetch(self, user_id: str) -> Cart:
        """Server cart for user_id; not-found and 5xx read as an empty cart."""
        response = await self._request("GET", f"/cart/{user_id}", "fetch")

        if response.status_code == 404 or response.status_code >= 500:
            logger.info(
                "No cart for user %s (status %s), using empty cart",
                sanitize_id_for_logging(user_id),
                response.status_code,
            )
            return Cart.empty(user_id)

        self._raise_for_status(response, "fetch")
        if not response.content:
            return Cart.empty(user_id)
        return self._parse_cart(response, user_id)

    async def add_line(self, user_id: str, product_id: ProductId, quantity: int) -> Cart:
        response = await self._request(
            "POST",
            "/cart/items",
            "add",
            json={"userId": user_id, "productId": product_id, "quantity": quantity},
        )
        return await self._cart_from_mutation(response, user_id, "add")

    async def update_line(self, line_id: LineId, quantity: int, user_id: Optional[str] = None) -> Cart:
        response = await self._request(
            "PUT", f"/cart/items/{line_id}", "update", json={"quantity": quantity}
        )
        return await self._cart_from_mutation(response, user_id, "update")

    async def remove_line(self, user_id: str, line_id: LineId) -> Cart:
        """Delete a line, then re-fetch: the delete response carries no cart."""
        response = await self._request(
            "DELETE", f"/cart/items/{line_id}", "remove", json={"userId": user_id}
        )
        self._raise_for_status(response, "remove")
        return await self.fetch(user_id)

    async def clear(self, user_id: str) -> Cart:
        response = await self._request("DELETE", f"/cart/{user_id}", "clear")
        self._raise_for_status(response, "clear")
        logger.info("Cleared cart for user %s", sanitize_id_for_logging(user_id))
        return Cart.empty(user_id)

    async def aclose(self) -> None:
        """Close http client if created."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


def _to_cart(payload: RemoteCartPayload, subject: Optional[str]) -> Cart:
    """Normalize a server payload, trusting the server total when it sent one."""
    items = [
        CartLine(
            line_id=line.line_id,
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            product=ProductSnapshot(
                id=line.product_id,
                name=line.product_name or "",
                price=line.unit_price,
                image_url=line.image_url,
                stock=line.stock,
            ),
        )
        for line in payload.items
    ]
    cart = Cart(items=items, subject=subject or payload.user_id)
    if payload.total is None:
        cart.recalculate_total()
    else:
        cart.total_amount = payload.total
    return cart
