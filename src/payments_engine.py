import logging
from typing import Dict, Optional, TextIO

from config import EngineConfig
from csv_io import read_transactions
from ledger_engine import AccountLedgerEngine
from models import ClientAccount

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Runs one transactions CSV through a fresh AccountLedgerEngine.
    Records are applied strictly in input order.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._ledger = AccountLedgerEngine(self._config)

    @property
    def ledger(self) -> AccountLedgerEngine:
        return self._ledger

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath} ({self._config.dispute_policy.value} disputes, {self._config.locked_policy.value} locked accounts)")
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        for transaction in read_transactions(stream):
            self._ledger.apply(transaction)

        stats = self._ledger.stats
        by_type = ", ".join(f"{name}={count}" for name, count in sorted(stats.by_type.items()))
        logger.info(f"Processed: {stats.applied}, Rejected: {stats.rejected} ({by_type})")

        return self._ledger.accounts()
