"""
Transaction List Filtering

Selects the transactions visible on the list screen. Criteria are ANDed:
type, category substring, inclusive date range (always active) and a
free-text search over description and category.

Output keeps the input's relative order. Nothing is re-sorted or mutated,
so running the same filter twice gives the same list.
"""

from typing import Sequence

from ledger.models.transaction import FilterSpec, FilterType, Transaction


def _contains(haystack: str, needle: str) -> bool:
    return needle.casefold() in haystack.casefold()


def matches_filter(transaction: Transaction, spec: FilterSpec) -> bool:
    """Check one transaction against every active criterion."""
    if spec.type != FilterType.ALL and transaction.type.value != spec.type.value:
        return False

    if spec.category_substring and not _contains(transaction.category, spec.category_substring):
        return False

    if not (spec.date_from <= transaction.transaction_date <= spec.date_to):
        return False

    if spec.search_text:
        if not (
            _contains(transaction.description, spec.search_text)
            or _contains(transaction.category, spec.search_text)
        ):
            return False

    return True


def filter_transactions(
    transactions: Sequence[Transaction],
    spec: FilterSpec,
) -> list[Transaction]:
    """Order-preserving subsequence of `transactions` matching `spec`."""
    return [t for t in transactions if matches_filter(t, spec)]
