"""
Client configuration.

Values come from the process environment, optionally seeded from a local
``.env`` file. Read them through the helpers below rather than caching
module constants so tests can override with ``monkeypatch.setenv``.
"""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_URL = "http://localhost:8081/api/v1"
DEFAULT_API_TIMEOUT = 5.0
DEFAULT_GUEST_CART_KEY = "guestCart"
DEFAULT_STORAGE_PATH = ".storefront/storage.json"
DEFAULT_CURRENCY = "INR"

STORAGE_BACKENDS = ("memory", "file", "upstash")


def get_api_url() -> str:
    """Base URL of the cart REST API, without a trailing slash."""
    return os.environ.get("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/")


def get_api_timeout() -> float:
    """Per-request timeout in seconds for backend calls."""
    raw = os.environ.get("STOREFRONT_API_TIMEOUT", "")
    try:
        return float(raw) if raw else DEFAULT_API_TIMEOUT
    except ValueError:
        return DEFAULT_API_TIMEOUT


def get_guest_cart_key() -> str:
    return os.environ.get("GUEST_CART_KEY", DEFAULT_GUEST_CART_KEY)


def get_storage_backend() -> str:
    """
    Which key-value storage holds the guest cart.

    - memory: process lifetime only (tests, previews)
    - file: JSON file on disk (desktop/kiosk builds)
    - upstash: Upstash Redis REST (shared kiosks)
    """
    backend = os.environ.get("CART_STORAGE_BACKEND", "memory").lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"CART_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )
    return backend


def get_storage_path() -> str:
    return os.environ.get("CART_STORAGE_PATH", DEFAULT_STORAGE_PATH)


def get_upstash_credentials() -> tuple[str, str]:
    """Upstash Redis REST URL and token (standard Upstash env var names)."""
    return (
        os.environ.get("UPSTASH_REDIS_REST_URL", ""),
        os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
    )


def get_currency() -> str:
    return os.environ.get("STOREFRONT_CURRENCY", DEFAULT_CURRENCY).upper()
