"""
Storage Services Package

Provides the abstract audit sink and its in-memory implementation.
The ledger itself is never persisted.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
)
from src.services.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    # Exceptions
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
]
