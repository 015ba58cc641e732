from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from models import DisputeState


@dataclass
class LedgerEntry:
    amount: Decimal
    client_id: Optional[int] = None
    state: DisputeState = DisputeState.DEPOSITED


class LedgerHistory:
    """
    Append-only record of deposits, keyed by transaction id.
    Disputes, resolves and chargebacks look their amount up here.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}

    def record_deposit(self, transaction_id: int, amount: Decimal, client_id: Optional[int] = None) -> bool:
        """Store a deposit. Returns False and keeps the first entry if the id is already known."""
        if transaction_id in self._entries:
            return False
        self._entries[transaction_id] = LedgerEntry(amount=amount, client_id=client_id)
        return True

    def lookup(self, transaction_id: int) -> Optional[Decimal]:
        """Deposited amount for a transaction id, or None."""
        entry = self._entries.get(transaction_id)
        return entry.amount if entry is not None else None

    def get_entry(self, transaction_id: int) -> Optional[LedgerEntry]:
        return self._entries.get(transaction_id)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
