"""
Personal Ledger - Source Package

The computational core of a personal-finance app: users record income and
expense transactions, organize them under categories, and see a running
balance with simple monthly charts.

DESIGN PRINCIPLES:
1. Persistence and auth belong to the hosted backend
2. Reject bad rows at the ingestion boundary, never inside a sum
3. Aggregation and filtering are pure functions over snapshots
4. The user is always passed explicitly
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
