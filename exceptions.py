"""
Exception hierarchy for SplitMate ledger.
"""
from __future__ import annotations


class LedgerError(Exception):
    """Base exception for ledger errors."""
    pass


class InvalidExpenseError(LedgerError):
    """Raised when an expense record cannot be split."""

    def __init__(self, expense_id: str, reason: str):
        super().__init__(f"expense {expense_id}: {reason}")
        self.expense_id = expense_id
        self.reason = reason


class LedgerFormatError(LedgerError):
    """Raised when a group snapshot, settings file or CSV row is malformed."""
    pass
