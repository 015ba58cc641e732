"""Exceptions raised at the edges of a ledger run."""

from typing import Optional


class PaymentsError(Exception):
    """Base exception for the payments engine"""

    pass


class TransactionParseError(PaymentsError):
    """An input row could not be decoded into a transaction"""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
