"""
Storage Module - Client-side key-value storage backends

Provides the synchronous key-value storage the guest cart lives in:
- MemoryStorage for tests and previews
- FileStorage, a JSON file on disk (the desktop analogue of localStorage)
- UpstashStorage, Upstash Redis for shared kiosk deployments

Every backend exposes get/set/remove and is allowed to raise; callers that
must not fail (the guest cart store) catch and degrade.
"""

import json
import os
from pathlib import Path
from typing import Optional, Protocol

from upstash_redis import Redis

from storefront import config
from storefront.logging import get_logger

logger = get_logger(__name__)


class KeyValueStorage(Protocol):
    """Synchronous string key-value storage."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage; contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """
    JSON file holding all keys.

    The whole file is rewritten on every set/remove through a temp file and
    os.replace, so a crash mid-write leaves the previous version in place.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold an object")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if value is None else str(value)

    def _load_for_write(self) -> dict[str, str]:
        """Current contents, or {} when the file is damaged so the next write replaces it."""
        try:
            return self._load()
        except ValueError as e:
            logger.warning(f"Storage file {self.path} unreadable, rewriting it: {e}")
            return {}

    def set(self, key: str, value: str) -> None:
        data = self._load_for_write()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load_for_write()
        data.pop(key, None)
        self._dump(data)


class StorageKeys:
    """Key prefixes for shared storage backends."""

    PREFIX = "storefront:"


class UpstashStorage:
    """Upstash Redis (REST) storage, namespaced by a key prefix."""

    def __init__(self, client: Redis, prefix: str = StorageKeys.PREFIX):
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        value = self._client.get(self._key(key))
        return value if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        self._client.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self._client.delete(self._key(key))


def create_storage(backend: Optional[str] = None) -> KeyValueStorage:
    """
    Build the configured storage backend.

    Args:
        backend: memory | file | upstash (defaults to CART_STORAGE_BACKEND)

    Raises:
        ValueError: unknown backend or missing Upstash credentials
    """
    backend = backend or config.get_storage_backend()
    logger.info("Guest cart storage backend: %s", backend)

    if backend == "memory":
        return MemoryStorage()

    if backend == "file":
        return FileStorage(config.get_storage_path())

    if backend == "upstash":
        url, token = config.get_upstash_credentials()
        if not url or not token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        return UpstashStorage(Redis(url=url, token=token))

    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
    "UpstashStorage",
    "StorageKeys",
    "create_storage",
]
