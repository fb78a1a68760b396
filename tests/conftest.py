"""Pytest configuration and fixtures"""
import json
import os
from typing import Optional

import httpx
import pytest

# Set test environment variables
os.environ.setdefault("STOREFRONT_API_URL", "http://testserver/api/v1")
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from storefront.auth import AuthSession  # noqa: E402
from storefront.cart import CartFacade, LocalCartStore, RemoteCartClient  # noqa: E402
from storefront.container import create_storefront  # noqa: E402
from storefront.db import MemoryStorage  # noqa: E402
from storefront.models import Product  # noqa: E402
from storefront.realtime import CartEventBus  # noqa: E402

API_URL = "http://testserver/api/v1"
API_PREFIX = "/api/v1"


class FailingStorage:
    """Storage whose every call raises, like a browser with storage disabled."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("storage unavailable")

    def remove(self, key):
        raise OSError("storage unavailable")


class FakeCartServer:
    """
    In-memory cart backend speaking the REST contract.

    Carts are created on first add; a user without one gets 404 on fetch.
    Item deletes and cart clears answer 204 with no body.
    """

    def __init__(self, products: list[Product]):
        self.products = {p.id: p for p in products}
        self.carts: dict[str, list[dict]] = {}
        self.requests: list[httpx.Request] = []
        self._next_line_id = 100
        self._failures: dict[str, tuple[int, Optional[str]]] = {}

    def fail(self, method: str, status: int, message: Optional[str] = "Request failed") -> None:
        """Answer the next request with this method with an error."""
        self._failures[method.upper()] = (status, message)

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    # Response builders

    def _cart_body(self, user_id: str) -> dict:
        lines = self.carts.get(user_id, [])
        return {
            "cartId": 1,
            "userId": user_id,
            "items": [
                {
                    "cartItemId": line["cartItemId"],
                    "product": {
                        "id": line["productId"],
                        "name": self.products[line["productId"]].name,
                        "price": float(self.products[line["productId"]].price),
                        "stock": self.products[line["productId"]].stock,
                    },
                    "quantity": line["quantity"],
                    "priceAtAdd": line["priceAtAdd"],
                }
                for line in lines
            ],
            "totalPrice": sum(line["priceAtAdd"] * line["quantity"] for line in lines),
        }

    @staticmethod
    def _error(status: int, message: Optional[str], path: str) -> httpx.Response:
        return httpx.Response(
            status,
            json={
                "timestamp": "2025-01-01T00:00:00Z",
                "status": status,
                "error": "Error",
                "message": message,
                "path": path,
            },
        )

    def _find_line(self, line_id: int) -> tuple[Optional[str], Optional[dict]]:
        for user_id, lines in self.carts.items():
            for line in lines:
                if line["cartItemId"] == line_id:
                    return user_id, line
        return None, None

    # Transport

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(API_PREFIX):]
        body = json.loads(request.content) if request.content else {}

        failure = self._failures.pop(request.method, None)
        if failure is not None:
            return self._error(failure[0], failure[1], path)

        parts = path.strip("/").split("/")

        if request.method == "GET" and parts[0] == "cart" and len(parts) == 2:
            user_id = parts[1]
            if user_id not in self.carts:
                return self._error(404, "Cart not found", path)
            return httpx.Response(200, json=self._cart_body(user_id))

        if request.method == "POST" and parts == ["cart", "items"]:
            user_id = str(body["userId"])
            product = self.products.get(body["productId"])
            if product is None:
                return self._error(404, "Product not found", path)
            lines = self.carts.setdefault(user_id, [])
            line = next((l for l in lines if l["productId"] == product.id), None)
            new_quantity = body["quantity"] + (line["quantity"] if line else 0)
            if new_quantity > product.stock:
                return self._error(400, "Insufficient stock", path)
            if line:
                line["quantity"] = new_quantity
            else:
                self._next_line_id += 1
                lines.append(
                    {
                        "cartItemId": self._next_line_id,
                        "productId": product.id,
                        "quantity": new_quantity,
                        "priceAtAdd": float(product.price),
                    }
                )
            return httpx.Response(200, json=self._cart_body(user_id))

        if request.method == "PUT" and parts[:2] == ["cart", "items"]:
            user_id, line = self._find_line(int(parts[2]))
            if line is None:
                return self._error(404, "Cart item not found", path)
            if body["quantity"] > self.products[line["productId"]].stock:
                return self._error(400, "Insufficient stock", path)
            line["quantity"] = body["quantity"]
            return httpx.Response(200, json=self._cart_body(user_id))

        if request.method == "DELETE" and parts[:2] == ["cart", "items"]:
            user_id, line = self._find_line(int(parts[2]))
            if line is None or str(body.get("userId")) != user_id:
                return self._error(404, "Cart item not found", path)
            self.carts[user_id].remove(line)
            return httpx.Response(204)

        if request.method == "DELETE" and parts[0] == "cart" and len(parts) == 2:
            self.carts.pop(parts[1], None)
            return httpx.Response(204)

        return self._error(404, "No route", path)


class RecordingNotifier:
    """Collects notify(message, variant) calls."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def __call__(self, message: str, variant: str = "info") -> None:
        self.messages.append((message, variant))

    @property
    def errors(self) -> list[str]:
        return [m for m, v in self.messages if v == "error"]


@pytest.fixture
def product_a():
    """Sample product priced 50"""
    return Product(id=1, name="Amul Butter", price=50, stock=10, imageUrl="/img/butter.png")


@pytest.fixture
def product_b():
    """Sample product priced 30"""
    return Product(id=2, name="Brown Bread", price=30, stock=3)


@pytest.fixture
def sold_out_product():
    return Product(id=3, name="Paneer", price=90, stock=0)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def failing_storage():
    return FailingStorage()


@pytest.fixture
def local_store(storage):
    return LocalCartStore(storage)


@pytest.fixture
def fake_server(product_a, product_b, sold_out_product):
    return FakeCartServer([product_a, product_b, sold_out_product])


@pytest.fixture
def http_client(fake_server):
    """httpx client routed to the fake backend (MockTransport holds no sockets)"""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_server.handler))


@pytest.fixture
def remote_client(http_client):
    return RemoteCartClient(base_url=API_URL, http_client=http_client)


@pytest.fixture
def events():
    return CartEventBus()


@pytest.fixture
def guest_session():
    return AuthSession()


@pytest.fixture
def user_session():
    return AuthSession(user_id="user-1", access_token="token-abc")


@pytest.fixture
def guest_facade(guest_session, local_store, remote_client, events):
    return CartFacade(guest_session, local_store, remote_client, events)


@pytest.fixture
def user_facade(user_session, local_store, remote_client, events):
    return CartFacade(user_session, local_store, remote_client, events)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def storefront(storage, http_client):
    """Fully wired storefront over memory storage and the fake backend."""
    return create_storefront(storage=storage, http_client=http_client, base_url=API_URL)
