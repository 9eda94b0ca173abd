"""Services package."""

from src.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "StorageError",
]
