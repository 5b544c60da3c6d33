# services/storage/base.py

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """Raised when the document store cannot read or write a value"""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class StorageQuotaExceededError(StorageError):
    """Raised when a value does not fit in the store"""


class BaseDocumentStore(ABC):
    """
    Abstract base class for document stores.
    A document store is a flat key-value store holding serialized JSON strings,
    the way a browser profile holds one blob per storage key.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the value exists but cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Overwrite the value stored under a key.

        Args:
            key: Storage key
            value: Serialized document

        Raises:
            StorageError: If the value cannot be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key; removing an absent key is not an error"""
        pass
