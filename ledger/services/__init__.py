"""Services package."""

from ledger.services.storage import (
    AuditStorageInterface,
    CategoryStorageInterface,
    InMemoryAuditStorage,
    InMemoryCategoryStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "CategoryStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryCategoryStorage",
    "InMemoryTransactionStorage",
    "NotFoundError",
    "StorageError",
    "TransactionStorageInterface",
]
