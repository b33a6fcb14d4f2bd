"""
Storage Services Package

Provides abstract interfaces to the hosted backend and an in-memory
implementation of them.
"""

from ledger.services.storage.interface import (
    AuditStorageInterface,
    CategoryStorageInterface,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryCategoryStorage,
    InMemoryTransactionStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "CategoryStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryCategoryStorage",
    "InMemoryTransactionStorage",
]
