# services/storage/memory_store.py

from typing import Dict, Optional

from .base import BaseDocumentStore, StorageQuotaExceededError


class InMemoryDocumentStore(BaseDocumentStore):
    def __init__(self, quota_bytes: Optional[int] = None):
        """Initialize the store

        Args:
            quota_bytes: Optional size limit per value, checked on the UTF-8
                encoded length. Writes over the limit fail like a full
                browser storage would.
        """
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None and len(value.encode("utf-8")) > self.quota_bytes:
            raise StorageQuotaExceededError(
                f"Value for '{key}' exceeds the {self.quota_bytes} byte quota", key
            )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
