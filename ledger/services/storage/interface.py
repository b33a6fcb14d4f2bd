"""
Abstract Storage Interface

DESIGN DECISION: Persistence and auth belong to a hosted backend.
The ledger only needs a narrow seam to it:
1. Fetch one user's raw transaction rows
2. Insert or delete a single record
3. Manage the user's categories

Rows come back RAW (plain dicts as the backend returns them). They are
validated at the ingestion boundary, never trusted as-is.

User scoping happens here, at the query boundary. The pure core never sees
another user's data.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from ledger.models.audit import AuditEvent
from ledger.models.transaction import (
    Category,
    Transaction,
    TransactionType,
)


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Any backend client must implement these methods.
    """

    @abstractmethod
    async def list_transaction_records(
        self,
        user_id: str,
    ) -> list[dict[str, Any]]:
        """
        Fetch every transaction row owned by a user.

        Args:
            user_id: Owner to scope the query to

        Returns:
            Raw rows, newest date first

        Raises:
            StorageError: If the backend call fails
        """
        pass

    @abstractmethod
    async def insert_transaction(self, transaction: Transaction) -> bool:
        """
        Insert a new transaction.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def delete_transaction(
        self,
        user_id: str,
        transaction_id: str,
    ) -> bool:
        """
        Delete one of the user's transactions.

        Raises:
            NotFoundError: If the user has no such transaction
        """
        pass


class CategoryStorageInterface(ABC):
    """Abstract interface for category storage operations."""

    @abstractmethod
    async def list_categories(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
    ) -> list[Category]:
        """
        List a user's categories, newest first.

        Args:
            user_id: Owner to scope the query to
            type: Only categories of this transaction type
        """
        pass

    @abstractmethod
    async def insert_categories(self, categories: list[Category]) -> bool:
        """Insert one or more categories in a single call."""
        pass

    @abstractmethod
    async def delete_category(
        self,
        user_id: str,
        category_id: UUID,
    ) -> bool:
        """
        Delete one of the user's categories.

        Transactions that reference it by name are left untouched.

        Raises:
            NotFoundError: If the user has no such category
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event to the log."""
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
