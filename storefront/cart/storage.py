"""Key-value storage access for the guest cart."""
from storefront.db import KeyValueStorage, MemoryStorage, FileStorage, UpstashStorage, create_storage

__all__ = ["KeyValueStorage", "MemoryStorage", "FileStorage", "UpstashStorage", "create_storage"]
