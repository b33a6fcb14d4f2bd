"""
Core Data Models for Personal Ledger

These models define the schemas for all data flowing through the ledger core.
They are designed to:
1. Enforce type safety at the ingestion boundary
2. Be immutable once built, so derived views can never corrupt a snapshot
3. Be serializable back to the backend's row shape

DESIGN DECISION: Transaction.category is a free-floating string.
It usually matches a Category name, but nothing enforces that.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


NO_CATEGORY = "none"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class FilterType(str, Enum):
    """Type selector of the transaction list screen."""
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense record.

    Owned by the persistence collaborator. The core only reads it, so the
    model is frozen.

    The backend row stores the date under the key "date"; in Python the
    field is `transaction_date` so it doesn't shadow the `date` type.

    Text is kept exactly as stored. Trimming belongs to the entry forms.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque backend identifier, stable across reloads"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owner of the transaction"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in the user's single currency unit"
    )
    description: str = Field(
        default="",
        description="Free-text label"
    )
    category: str = Field(
        default="",
        description="Category name (not referentially enforced)"
    )
    transaction_date: date = Field(
        ...,
        alias="date",
        description="Calendar date, no time-of-day"
    )
    receipt_url: Optional[str] = Field(
        default=None,
        description="Local file reference to a receipt photo"
    )

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        """Serial keys and UUIDs are both just ids here."""
        if isinstance(v, (int, UUID)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('transaction_date', mode='before')
    @classmethod
    def drop_time_of_day(cls, v: Any) -> Any:
        """Backends sometimes hand back timestamps; only the date counts."""
        if isinstance(v, datetime):
            return v.date()
        return v

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    def to_record(self) -> dict:
        """Convert to the backend's row shape."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type.value,
            "amount": str(self.amount),
            "description": self.description,
            "category": self.category,
            "date": self.transaction_date.isoformat(),
            "receipt_url": self.receipt_url,
        }


class Category(BaseModel):
    """A user-configured category name for one transaction type."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name shown in the entry forms"
    )
    type: TransactionType
    created_at: datetime = Field(
        default_factory=datetime.utcnow
    )


# =============================================================================
# FILTER MODEL
# =============================================================================

def _first_of_month(today: date) -> date:
    return today.replace(day=1)


class FilterSpec(BaseModel):
    """
    Criteria of the transaction list screen.

    All criteria are ANDed. The date range is always active and inclusive;
    by default it frames "this month so far".
    """

    type: FilterType = FilterType.ALL
    category_substring: str = ""
    date_from: date = Field(
        default_factory=lambda: _first_of_month(date.today())
    )
    date_to: date = Field(
        default_factory=date.today
    )
    search_text: str = ""

    @classmethod
    def this_month(cls, today: Optional[date] = None, **criteria: Any) -> "FilterSpec":
        """First day of the current month through `today`."""
        today = today or date.today()
        return cls(date_from=_first_of_month(today), date_to=today, **criteria)

    @classmethod
    def unbounded(cls, **criteria: Any) -> "FilterSpec":
        """A spec whose date range admits every representable date."""
        return cls(date_from=date.min, date_to=date.max, **criteria)


# =============================================================================
# DERIVED MODELS (dashboard)
# =============================================================================

class MonthlyBucket(BaseModel):
    """Income and expense totals for one calendar month."""

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def key(self) -> str:
        """Sortable, unambiguous label: "2024-01", never "2024-1"."""
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


class Highlights(BaseModel):
    """Headline statistics shown under the dashboard chart."""

    highest_expense: Optional[Transaction] = None
    most_used_category: str = NO_CATEGORY


class DashboardSummary(BaseModel):
    """
    Everything the dashboard renders.

    Rebuilt from scratch on every load.
    """

    balance: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    monthly_series: list[MonthlyBucket] = Field(default_factory=list)
    highlights: Highlights = Field(default_factory=Highlights)
    transaction_count: int = Field(default=0, ge=0)


# =============================================================================
# VALIDATION MODELS (ingestion boundary)
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'foreign_record')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class TransactionEntry(BaseModel):
    """
    A validated entry-form submission, not yet persisted.

    Warnings never block saving; they are shown to the user.
    """

    type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    transaction_date: date
    receipt_url: Optional[str] = None
    warnings: list[ValidationIssue] = Field(default_factory=list)

    def to_transaction(self, user_id: str) -> Transaction:
        """Assign a fresh id; from here on the id never changes."""
        return Transaction(
            id=str(uuid4()),
            user_id=user_id,
            type=self.type,
            amount=self.amount,
            description=self.description,
            category=self.category,
            transaction_date=self.transaction_date,
            receipt_url=self.receipt_url,
        )


class RejectedRecord(BaseModel):
    """A backend row that failed validation and was kept out of the core."""

    index: int = Field(..., ge=0, description="Position in the fetched batch")
    record: dict[str, Any] = Field(default_factory=dict)
    issues: list[ValidationIssue] = Field(default_factory=list)


class IngestionResult(BaseModel):
    """Outcome of validating a fetched batch of rows."""

    transactions: list[Transaction] = Field(default_factory=list)
    rejected: list[RejectedRecord] = Field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.transactions)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    @property
    def has_rejections(self) -> bool:
        return bool(self.rejected)
