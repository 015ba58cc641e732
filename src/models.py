from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from config import AMOUNT_CONTEXT


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"


class DisputeState(Enum):
    DEPOSITED = "deposited"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    total: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def available(self) -> Decimal:
        return AMOUNT_CONTEXT.subtract(self.total, self.held)

    def is_default(self) -> bool:
        """True while the account has never moved away from its initial state."""
        return self.total == 0 and self.held == 0 and not self.locked

    def credit(self, amount: Decimal) -> None:
        self.total += amount

    def debit(self, amount: Decimal) -> None:
        self.total -= amount

    def hold(self, amount: Decimal) -> None:
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount

    def charge_back(self, amount: Decimal) -> None:
        self.held -= amount
        self.total -= amount
        self.locked = True


@dataclass
class ProcessingStats:
    """Counters for tracking processing statistics."""

    applied: int = 0
    rejected: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)

    def record(self, transaction: Transaction, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.rejected += 1
        key = transaction.transaction_type.value
        self.by_type[key] = self.by_type.get(key, 0) + 1
