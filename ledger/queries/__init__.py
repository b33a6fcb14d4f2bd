"""Pure aggregation and filtering over transaction snapshots."""

from ledger.queries.aggregator import (
    aggregate,
    build_monthly_series,
    compute_balance,
    compute_highlights,
    compute_totals,
    find_highest_expense,
    find_most_used_category,
)
from ledger.queries.filters import filter_transactions, matches_filter

__all__ = [
    "aggregate",
    "build_monthly_series",
    "compute_balance",
    "compute_highlights",
    "compute_totals",
    "find_highest_expense",
    "find_most_used_category",
    "filter_transactions",
    "matches_filter",
]
