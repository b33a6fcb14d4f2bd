"""
In-Memory Storage

Backend-less implementations of the storage interfaces. Used by tests and
by hosts that run the ledger without a hosted backend.

Rows are kept in the backend's wire shape (plain dicts) so that reads go
through the same ingestion boundary as a real backend's responses.
"""

import copy
from typing import Any, Optional
from uuid import UUID

from ledger.models.audit import AuditEvent
from ledger.models.transaction import (
    Category,
    Transaction,
    TransactionType,
)
from ledger.services.storage.interface import (
    AuditStorageInterface,
    CategoryStorageInterface,
    NotFoundError,
    TransactionStorageInterface,
)


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Transaction rows held in a list."""

    def __init__(self, records: Optional[list[dict[str, Any]]] = None):
        """
        Args:
            records: Pre-existing raw rows. They are stored unvalidated,
                     exactly as a backend might hold them.
        """
        self._records: list[dict[str, Any]] = [dict(r) for r in records or []]

    async def list_transaction_records(
        self,
        user_id: str,
    ) -> list[dict[str, Any]]:
        rows = [
            copy.deepcopy(r) for r in self._records
            if r.get("user_id") == user_id
        ]
        # Same ordering the backend query asks for; unparseable dates sink.
        rows.sort(key=lambda r: str(r.get("date") or ""), reverse=True)
        return rows

    async def insert_transaction(self, transaction: Transaction) -> bool:
        self._records.append(transaction.to_record())
        return True

    async def delete_transaction(
        self,
        user_id: str,
        transaction_id: str,
    ) -> bool:
        for i, row in enumerate(self._records):
            if row.get("user_id") == user_id and str(row.get("id")) == transaction_id:
                del self._records[i]
                return True
        raise NotFoundError(f"Transaction {transaction_id} not found")


class InMemoryCategoryStorage(CategoryStorageInterface):
    """Categories held in a list, in insertion order."""

    def __init__(self):
        self._categories: list[Category] = []

    async def list_categories(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
    ) -> list[Category]:
        categories = [
            c for c in self._categories
            if c.user_id == user_id and (type is None or c.type == type)
        ]
        # Newest first; list position breaks created_at ties.
        return [
            c for _, c in sorted(
                enumerate(categories),
                key=lambda pair: (pair[1].created_at, pair[0]),
                reverse=True,
            )
        ]

    async def insert_categories(self, categories: list[Category]) -> bool:
        self._categories.extend(categories)
        return True

    async def delete_category(
        self,
        user_id: str,
        category_id: UUID,
    ) -> bool:
        for i, category in enumerate(self._categories):
            if category.user_id == user_id and category.id == category_id:
                del self._categories[i]
                return True
        raise NotFoundError(f"Category {category_id} not found")


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
