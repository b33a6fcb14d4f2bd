"""
Dashboard Aggregation

Reduces a user's transaction snapshot into what the dashboard renders:
running balance, a per-month income/expense series, and two highlights.

DESIGN DECISION: Aggregation is PURE.
No I/O, no logging, no exceptions on well-typed input. Rows that could
corrupt a sum are rejected at the ingestion boundary (ledger.validation)
before they ever get here.

The monthly series is sorted chronologically. Grouping uses (year, month)
integer pairs, so "2024-1" vs "2024-10" style collisions cannot happen.
"""

from collections import Counter
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ledger.models.transaction import (
    NO_CATEGORY,
    DashboardSummary,
    Highlights,
    MonthlyBucket,
    Transaction,
)


def _sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0"))


def compute_totals(transactions: Sequence[Transaction]) -> tuple[Decimal, Decimal]:
    """Return (total_income, total_expenses)."""
    income = _sum_amounts(t for t in transactions if t.is_income)
    expenses = _sum_amounts(t for t in transactions if t.is_expense)
    return income, expenses


def compute_balance(transactions: Sequence[Transaction]) -> Decimal:
    """Sum of income amounts minus sum of expense amounts. Empty -> 0."""
    income, expenses = compute_totals(transactions)
    return income - expenses


def build_monthly_series(transactions: Sequence[Transaction]) -> list[MonthlyBucket]:
    """
    Group by calendar month and total each side independently.

    Returns buckets in ascending (year, month) order. Months without any
    transaction are not emitted.
    """
    groups: dict[tuple[int, int], dict[str, Decimal]] = {}

    for transaction in transactions:
        key = (transaction.transaction_date.year, transaction.transaction_date.month)

        if key not in groups:
            groups[key] = {"income": Decimal("0"), "expenses": Decimal("0")}

        if transaction.is_income:
            groups[key]["income"] += transaction.amount
        else:
            groups[key]["expenses"] += transaction.amount

    return [
        MonthlyBucket(
            year=year,
            month=month,
            income=totals["income"],
            expenses=totals["expenses"],
        )
        for (year, month), totals in sorted(groups.items())
    ]


def find_highest_expense(transactions: Sequence[Transaction]) -> Optional[Transaction]:
    """The largest expense; on ties the first one in input order wins."""
    highest = None
    for transaction in transactions:
        if not transaction.is_expense:
            continue
        if highest is None or transaction.amount > highest.amount:
            highest = transaction
    return highest


def find_most_used_category(transactions: Sequence[Transaction]) -> str:
    """
    The category on the most transactions, income and expense alike.

    Single left-to-right scan: the leader only changes when a category
    strictly exceeds the current best count, so on ties the category that
    reached the final maximum first wins.
    """
    counts: Counter[str] = Counter()
    best_category = NO_CATEGORY
    best_count = 0

    for transaction in transactions:
        counts[transaction.category] += 1
        if counts[transaction.category] > best_count:
            best_category = transaction.category
            best_count = counts[transaction.category]

    return best_category


def compute_highlights(transactions: Sequence[Transaction]) -> Highlights:
    return Highlights(
        highest_expense=find_highest_expense(transactions),
        most_used_category=find_most_used_category(transactions),
    )


def aggregate(transactions: Sequence[Transaction]) -> DashboardSummary:
    """
    Build the full dashboard summary for one user's snapshot.

    The input is only read; every derived structure is freshly built.
    """
    total_income, total_expenses = compute_totals(transactions)

    return DashboardSummary(
        balance=total_income - total_expenses,
        total_income=total_income,
        total_expenses=total_expenses,
        monthly_series=build_monthly_series(transactions),
        highlights=compute_highlights(transactions),
        transaction_count=len(transactions),
    )
