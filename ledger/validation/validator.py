"""
Ingestion Boundary and Form Validation

DESIGN DECISION: Validation happens at the boundary, in two stages:

STAGE 1 - SCHEMA VALIDATION:
- Type tag is income/expense
- Amount is a finite, non-negative number
- Date parses as a calendar date
- This catches malformed rows from the backend

STAGE 2 - SEMANTIC VALIDATION:
- Row belongs to the user we asked for
- (entry forms) amount positive, suspiciously large amounts, far-future dates

WHY AT THE BOUNDARY:
The aggregator and filter engine are pure and never re-check anything.
A non-numeric amount that slipped through would silently corrupt a sum,
so such rows are rejected here and never reach them.

IMPORTANT: Validation NEVER silently fixes issues.
Comma decimal separators in typed amounts are the one normalization,
because that is how users type money.
"""

from collections.abc import Mapping
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ledger.config import get_settings
from ledger.models.transaction import (
    IngestionResult,
    RejectedRecord,
    Transaction,
    TransactionEntry,
    TransactionType,
    ValidationIssue,
)


CENTS = Decimal("0.01")


class TransactionValidationError(Exception):
    """A record or form submission failed validation."""

    def __init__(self, message: str, issues: list[ValidationIssue]):
        super().__init__(message)
        self.issues = issues

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


def _has_errors(issues: Iterable[ValidationIssue]) -> bool:
    return any(issue.severity == "error" for issue in issues)


class TransactionValidator:
    """
    Validates backend rows and entry-form submissions.

    Stage 1: Schema validation (Pydantic)
    Stage 2: Semantic validation (ownership, sanity thresholds)
    """

    def __init__(self):
        self._settings = get_settings().app

    # -------------------------------------------------------------------------
    # Backend rows
    # -------------------------------------------------------------------------

    def _validate_schema(
        self,
        record: Any,
    ) -> tuple[Optional[Transaction], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (transaction_or_none, list_of_issues)
        """
        if not isinstance(record, Mapping):
            return None, [ValidationIssue(
                field="record",
                issue_type="invalid_format",
                message=f"Expected a mapping, got {type(record).__name__}",
                severity="error",
            )]

        try:
            return Transaction.model_validate(dict(record)), []
        except PydanticValidationError as e:
            issues = []
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"]) or "record"
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing" if error["type"] == "missing" else "invalid_value",
                    message=f"{field}: {error['msg']}",
                    severity="error",
                ))
            return None, issues

    def _validate_semantic(
        self,
        transaction: Transaction,
        user_id: Optional[str],
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation of a parsed row.

        The backend query is already user-scoped; this is the last check
        before the row joins that user's snapshot.
        """
        issues = []

        if user_id is not None and transaction.user_id != user_id:
            issues.append(ValidationIssue(
                field="user_id",
                issue_type="foreign_record",
                message="Transaction belongs to a different user",
                severity="error",
            ))

        return issues

    def parse_record(
        self,
        record: Any,
        user_id: Optional[str] = None,
    ) -> Transaction:
        """
        Validate one backend row and return it as a Transaction.

        Args:
            record: Raw row as returned by the backend
            user_id: If given, the row must belong to this user

        Raises:
            TransactionValidationError: With every issue found
        """
        transaction, issues = self._validate_schema(record)

        # Only run stage 2 if stage 1 passes
        if transaction is not None:
            issues.extend(self._validate_semantic(transaction, user_id))

        if transaction is None or _has_errors(issues):
            raise TransactionValidationError("Invalid transaction record", issues)

        return transaction

    def ingest(
        self,
        records: Iterable[Any],
        user_id: Optional[str] = None,
    ) -> IngestionResult:
        """
        Validate a fetched batch.

        Valid rows keep their relative order. Invalid rows are reported in
        `rejected` and left out of `transactions`.
        """
        result = IngestionResult()

        for index, record in enumerate(records):
            try:
                result.transactions.append(self.parse_record(record, user_id=user_id))
            except TransactionValidationError as e:
                result.rejected.append(RejectedRecord(
                    index=index,
                    record=(
                        {str(k): v for k, v in record.items()}
                        if isinstance(record, Mapping) else {}
                    ),
                    issues=e.issues,
                ))

        return result

    # -------------------------------------------------------------------------
    # Entry forms
    # -------------------------------------------------------------------------

    def _parse_amount(
        self,
        amount: Union[str, Decimal, int, float, None],
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        """Parse a typed amount; "12,50" and "12.50" are the same."""
        text = "" if amount is None else str(amount).strip()

        if not text:
            return None, [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter how much money moved",
            )]

        text = text.replace(",", ".")
        try:
            value = Decimal(text).quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            # Infinity, sNaN and numbers with too many digits to hold in cents
            value = None

        if value is None or not value.is_finite():
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"'{amount}' is not a valid amount",
                severity="error",
                suggested_fix="Use digits with an optional decimal separator, e.g. 12,50",
            )]

        if value <= 0:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            )]

        return value, []

    def validate_entry(
        self,
        type: TransactionType,
        amount: Union[str, Decimal, int, float, None],
        description: Optional[str],
        category: Optional[str],
        transaction_date: Optional[date] = None,
        receipt_url: Optional[str] = None,
        today: Optional[date] = None,
    ) -> TransactionEntry:
        """
        Validate an income/expense entry form.

        Amount, description and category are required; the amount must be
        a positive number. Large amounts and far-future dates only warn.

        Raises:
            TransactionValidationError: If any error-level issue is found
        """
        issues = []
        today = today or date.today()
        transaction_date = transaction_date or today

        value, amount_issues = self._parse_amount(amount)
        issues.extend(amount_issues)

        description = (description or "").strip()
        if not description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
            ))

        category = (category or "").strip()
        if not category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Pick one of your categories",
            ))

        if _has_errors(issues):
            raise TransactionValidationError("Entry form has errors", issues)

        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if value > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=(
                    f"Amount ({self._settings.currency_symbol} {value:,.2f}) "
                    "seems unusually high"
                ),
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if transaction_date > max_future_date:
            issues.append(ValidationIssue(
                field="transaction_date",
                issue_type="future_date",
                message=f"Date ({transaction_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        return TransactionEntry(
            type=type,
            amount=value,
            description=description,
            category=category,
            transaction_date=transaction_date,
            receipt_url=receipt_url,
            warnings=issues,
        )

    def validate_category_name(self, name: Optional[str]) -> str:
        """Return the trimmed name, or raise if nothing is left."""
        name = (name or "").strip()
        if not name:
            raise TransactionValidationError("Category name is required", [
                ValidationIssue(
                    field="name",
                    issue_type="missing",
                    message="Please type a name for the category",
                    severity="error",
                ),
            ])
        return name

    def get_user_friendly_summary(
        self,
        issues: list[ValidationIssue],
    ) -> str:
        """
        Generate a user-friendly summary of validation issues.

        This is what the entry screens show in their alert.
        """
        if not issues:
            return "✅ All checks passed!"

        lines = []
        errors = [i for i in issues if i.severity == "error"]
        warnings = [i for i in issues if i.severity == "warning"]

        if errors:
            lines.append("❌ Please fix the following:")
            for issue in errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        return "\n".join(lines)
