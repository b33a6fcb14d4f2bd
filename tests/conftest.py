"""Shared fixtures: transaction factory and the dashboard scenario."""

import os
from datetime import date
from typing import Optional
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger.config import get_settings
from ledger.models.transaction import Transaction, TransactionType


USER_ID = "user-1"


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep LEDGER_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("LEDGER_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_transaction():
    """Build a Transaction with sensible defaults."""

    def _make(
        type: TransactionType = TransactionType.EXPENSE,
        amount="10",
        category: str = "Food",
        on: date = date(2024, 1, 10),
        description: str = "",
        user_id: str = USER_ID,
        id: Optional[str] = None,
    ) -> Transaction:
        return Transaction(
            id=id or str(uuid4()),
            user_id=user_id,
            type=type,
            amount=Decimal(str(amount)),
            category=category,
            description=description,
            transaction_date=on,
        )

    return _make


@pytest.fixture
def scenario(make_transaction) -> list[Transaction]:
    """Two Food expenses around one salary, across January and February 2024."""
    return [
        make_transaction(TransactionType.EXPENSE, 50, "Food", date(2024, 1, 10), "Groceries"),
        make_transaction(TransactionType.INCOME, 1000, "Salary", date(2024, 1, 5), "January pay"),
        make_transaction(TransactionType.EXPENSE, 200, "Food", date(2024, 2, 1), "Restaurant"),
    ]
