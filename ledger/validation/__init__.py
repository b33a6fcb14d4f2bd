"""Ingestion boundary and form validation package."""

from ledger.validation.validator import (
    TransactionValidationError,
    TransactionValidator,
)

__all__ = ["TransactionValidationError", "TransactionValidator"]
