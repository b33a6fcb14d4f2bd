"""
Main Orchestrator for Personal Ledger

This module ties together all the components and defines the
end-to-end flows behind each screen:
1. Dashboard (fetch → ingest → aggregate)
2. Transaction list (fetch → ingest → filter)
3. Income/expense entry (validate form → insert)
4. Categories (list, add, delete, seed defaults for new accounts)

DESIGN DECISION: The user is passed explicitly into every flow.
There is no process-wide session. The storage seam scopes each query to
that user, and the pure core only ever sees one user's snapshot.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, NamedTuple, Optional, Union
from uuid import UUID

from ledger.audit import AuditLogger, configure_logging, create_correlation_id
from ledger.config import get_settings
from ledger.models.transaction import (
    Category,
    DashboardSummary,
    FilterSpec,
    IngestionResult,
    Transaction,
    TransactionType,
    ValidationIssue,
)
from ledger.queries import aggregate, filter_transactions
from ledger.services.storage import (
    AuditStorageInterface,
    CategoryStorageInterface,
    InMemoryCategoryStorage,
    InMemoryTransactionStorage,
    StorageError,
    TransactionStorageInterface,
)
from ledger.validation import TransactionValidationError, TransactionValidator


DEFAULT_CATEGORIES: list[tuple[str, TransactionType]] = [
    # Expenses
    ("Food", TransactionType.EXPENSE),
    ("Transport", TransactionType.EXPENSE),
    ("Housing", TransactionType.EXPENSE),
    ("Health", TransactionType.EXPENSE),
    ("Education", TransactionType.EXPENSE),
    ("Leisure", TransactionType.EXPENSE),
    ("Shopping", TransactionType.EXPENSE),
    ("Other", TransactionType.EXPENSE),
    # Income
    ("Salary", TransactionType.INCOME),
    ("Freelance", TransactionType.INCOME),
    ("Investments", TransactionType.INCOME),
    ("Gifts", TransactionType.INCOME),
    ("Other", TransactionType.INCOME),
]


def _issues_for_audit(issues: list[ValidationIssue]) -> list[dict]:
    return [
        {"field": i.field, "type": i.issue_type, "message": i.message}
        for i in issues
    ]


async def load_snapshot(
    storage: TransactionStorageInterface,
    validator: TransactionValidator,
    user_id: str,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> IngestionResult:
    """
    Fetch a user's rows and pass them through the ingestion boundary.

    Rejected rows are audited and dropped; only validated transactions
    are returned for the pure core to work on.

    Raises:
        StorageError: If the backend fetch fails (after auditing it)
    """
    correlation_id = correlation_id or create_correlation_id()

    try:
        records = await storage.list_transaction_records(user_id)
    except StorageError as e:
        if audit_logger:
            await audit_logger.log_error(
                error_type="transactions_fetch_failed",
                error_message=str(e),
                user_id=user_id,
                correlation_id=correlation_id,
            )
        raise

    result = validator.ingest(records, user_id=user_id)

    if audit_logger:
        for rejected in result.rejected:
            await audit_logger.log_transaction_rejected(
                user_id=user_id,
                rejected=rejected,
                correlation_id=correlation_id,
            )
        await audit_logger.log_transactions_loaded(
            user_id=user_id,
            accepted=result.accepted_count,
            rejected=result.rejected_count,
            correlation_id=correlation_id,
        )

    return result


class DashboardFlow:
    """
    Orchestrates the dashboard.

    Flow:
    1. Fetch the user's rows (newest first)
    2. Validate them at the ingestion boundary
    3. Aggregate: balance, monthly series, highlights
    """

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._transaction_storage = transaction_storage
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger

    async def load(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> DashboardSummary:
        snapshot = await load_snapshot(
            self._transaction_storage,
            self._validator,
            user_id,
            audit_logger=self._audit_logger,
            correlation_id=correlation_id,
        )
        return aggregate(snapshot.transactions)


class TransactionListFlow:
    """
    Orchestrates the transaction list screen.

    The filter is re-applied to the same snapshot whenever the user edits
    it; only a reload goes back to storage.
    """

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._transaction_storage = transaction_storage
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger

    async def load_all(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """The user's full validated snapshot, newest first."""
        snapshot = await load_snapshot(
            self._transaction_storage,
            self._validator,
            user_id,
            audit_logger=self._audit_logger,
            correlation_id=correlation_id,
        )
        return snapshot.transactions

    async def load(
        self,
        user_id: str,
        spec: Optional[FilterSpec] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """
        The visible subset for `spec`.

        Without a spec the list opens on "this month so far".
        """
        transactions = await self.load_all(user_id, correlation_id=correlation_id)
        return filter_transactions(transactions, spec or FilterSpec.this_month())


class TransactionEntryFlow:
    """
    Orchestrates the income and expense entry forms.

    Flow:
    1. Validate the form (required fields, positive amount)
    2. Build the Transaction for the given user
    3. Insert it
    """

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._transaction_storage = transaction_storage
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger

    async def add_transaction(
        self,
        user_id: str,
        type: TransactionType,
        amount: Union[str, Decimal, int, float, None],
        description: Optional[str],
        category: Optional[str],
        transaction_date: Optional[date] = None,
        receipt_url: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Transaction, list[ValidationIssue]]:
        """
        Validate and save a new transaction.

        Returns:
            (saved_transaction, warnings)

        Raises:
            TransactionValidationError: If the form has errors (nothing saved)
            StorageError: If the insert fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            entry = self._validator.validate_entry(
                type=type,
                amount=amount,
                description=description,
                category=category,
                transaction_date=transaction_date,
                receipt_url=receipt_url,
            )
        except TransactionValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    user_id=user_id,
                    form=type.value,
                    issues=_issues_for_audit(e.issues),
                    correlation_id=correlation_id,
                )
            raise

        transaction = entry.to_transaction(user_id)

        try:
            await self._transaction_storage.insert_transaction(transaction)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="transaction_insert_failed",
                    error_message=str(e),
                    user_id=user_id,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_created(
                user_id=user_id,
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
                correlation_id=correlation_id,
            )

        return transaction, entry.warnings

    async def add_expense(
        self,
        user_id: str,
        amount: Union[str, Decimal, int, float, None],
        description: Optional[str],
        category: Optional[str],
        **kwargs: Any,
    ) -> tuple[Transaction, list[ValidationIssue]]:
        return await self.add_transaction(
            user_id, TransactionType.EXPENSE, amount, description, category, **kwargs
        )

    async def add_income(
        self,
        user_id: str,
        amount: Union[str, Decimal, int, float, None],
        description: Optional[str],
        category: Optional[str],
        **kwargs: Any,
    ) -> tuple[Transaction, list[ValidationIssue]]:
        return await self.add_transaction(
            user_id, TransactionType.INCOME, amount, description, category, **kwargs
        )

    async def delete_transaction(
        self,
        user_id: str,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Raises:
            NotFoundError: If the user has no such transaction
        """
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._transaction_storage.delete_transaction(user_id, transaction_id)

        if deleted and self._audit_logger:
            await self._audit_logger.log_transaction_deleted(
                user_id=user_id,
                transaction_id=transaction_id,
                correlation_id=correlation_id,
            )

        return deleted


def is_new_account(
    account_created_at: datetime,
    now: Optional[datetime] = None,
    window_minutes: int = 5,
) -> bool:
    """
    Heuristic: an account younger than `window_minutes` on sign-in is new.

    The auth backend emits no explicit sign-up event, only a creation
    timestamp on the user.
    """
    if now is None:
        if account_created_at.tzinfo is not None:
            now = datetime.now(timezone.utc)
        else:
            now = datetime.utcnow()

    age = now - account_created_at
    return timedelta(0) <= age < timedelta(minutes=window_minutes)


class CategoryFlow:
    """
    Orchestrates the categories screen and default-category seeding.

    Deleting a category never touches transactions: they reference
    categories by name only.
    """

    def __init__(
        self,
        category_storage: CategoryStorageInterface,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._category_storage = category_storage
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger
        self._settings = get_settings().app

    async def list_categories(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
    ) -> list[Category]:
        return await self._category_storage.list_categories(user_id, type=type)

    async def add_category(
        self,
        user_id: str,
        name: Optional[str],
        type: TransactionType,
        correlation_id: Optional[UUID] = None,
    ) -> Category:
        """
        Raises:
            TransactionValidationError: If the name is blank
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            name = self._validator.validate_category_name(name)
        except TransactionValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    user_id=user_id,
                    form="category",
                    issues=_issues_for_audit(e.issues),
                    correlation_id=correlation_id,
                )
            raise

        category = Category(user_id=user_id, name=name, type=type)
        await self._category_storage.insert_categories([category])

        if self._audit_logger:
            await self._audit_logger.log_category_created(
                user_id=user_id,
                category_id=category.id,
                name=category.name,
                category_type=category.type.value,
                correlation_id=correlation_id,
            )

        return category

    async def delete_category(
        self,
        user_id: str,
        category_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._category_storage.delete_category(user_id, category_id)

        if deleted and self._audit_logger:
            await self._audit_logger.log_category_deleted(
                user_id=user_id,
                category_id=category_id,
                correlation_id=correlation_id,
            )

        return deleted

    async def seed_default_categories(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[Category]:
        """Insert the default category set in one call."""
        correlation_id = correlation_id or create_correlation_id()

        categories = [
            Category(user_id=user_id, name=name, type=category_type)
            for name, category_type in DEFAULT_CATEGORIES
        ]
        await self._category_storage.insert_categories(categories)

        if self._audit_logger:
            await self._audit_logger.log_default_categories_seeded(
                user_id=user_id,
                count=len(categories),
                correlation_id=correlation_id,
            )

        return categories

    async def ensure_defaults_for_new_user(
        self,
        user_id: str,
        account_created_at: datetime,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Category]:
        """
        Seed defaults on sign-in if the account is new and still empty.

        Returns the seeded categories, or [] if nothing was done.
        """
        if not self._settings.seed_default_categories:
            return []

        if not is_new_account(
            account_created_at,
            now=now,
            window_minutes=self._settings.new_user_window_minutes,
        ):
            return []

        # A second sign-in inside the window must not seed twice.
        if await self._category_storage.list_categories(user_id):
            return []

        return await self.seed_default_categories(user_id, correlation_id=correlation_id)


class AppComponents(NamedTuple):
    """Every flow, wired to the same storage and audit logger."""

    dashboard: DashboardFlow
    transactions: TransactionListFlow
    entry: TransactionEntryFlow
    categories: CategoryFlow


def create_app_components(
    transaction_storage: Optional[TransactionStorageInterface] = None,
    category_storage: Optional[CategoryStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        transaction_storage: Backend client for transactions.
                    Defaults to in-memory storage.
        category_storage: Backend client for categories.
                    Defaults to in-memory storage.
        audit_storage: Where audit events persist. If None, audit events
                    are only logged locally.
    """
    configure_logging()
    transaction_storage = transaction_storage or InMemoryTransactionStorage()
    category_storage = category_storage or InMemoryCategoryStorage()
    audit_logger = AuditLogger(audit_storage)
    validator = TransactionValidator()

    return AppComponents(
        dashboard=DashboardFlow(transaction_storage, validator, audit_logger),
        transactions=TransactionListFlow(transaction_storage, validator, audit_logger),
        entry=TransactionEntryFlow(transaction_storage, validator, audit_logger),
        categories=CategoryFlow(category_storage, validator, audit_logger),
    )
