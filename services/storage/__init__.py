from .base import BaseDocumentStore, StorageError, StorageQuotaExceededError
from .file_store import FileDocumentStore
from .memory_store import InMemoryDocumentStore
from .migrations import (
    InvalidSchemaError,
    SchemaVersion,
    detect_schema_version,
    migrate_to_current,
)

__all__ = [
    "BaseDocumentStore",
    "StorageError",
    "StorageQuotaExceededError",
    "FileDocumentStore",
    "InMemoryDocumentStore",
    "InvalidSchemaError",
    "SchemaVersion",
    "detect_schema_version",
    "migrate_to_current",
]
