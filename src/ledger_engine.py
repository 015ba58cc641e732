import logging
from decimal import localcontext
from typing import Dict, Optional

from config import AMOUNT_CONTEXT, EngineConfig
from ledger_history import LedgerEntry, LedgerHistory
from models import ClientAccount, DisputeState, ProcessingResult, ProcessingStats, Transaction, TransactionType

logger = logging.getLogger(__name__)


class AccountLedgerEngine:
    """
    Replays transactions against per-client accounts in input order.

    A record that fails its precondition leaves every account unchanged and
    is never raised to the caller; the next record is processed as usual.
    """

    def __init__(self, config: Optional[EngineConfig] = None, history: Optional[LedgerHistory] = None):
        self._config = config or EngineConfig()
        self._history = history if history is not None else LedgerHistory()
        self._accounts: Dict[int, ClientAccount] = {}
        self.stats = ProcessingStats()

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def history(self) -> LedgerHistory:
        return self._history

    def apply(self, transaction: Transaction) -> None:
        """Apply a single transaction. Rejections are logged, never raised."""
        result = self.process_transaction(transaction)
        self.stats.record(transaction, result)

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        with localcontext(AMOUNT_CONTEXT):
            return self._dispatch(transaction)

    def _dispatch(self, transaction: Transaction) -> ProcessingResult:
        account = self._get_or_create_account(transaction.client_id)

        if account.locked and self._config.reject_locked:
            logger.info(f"{transaction}: account {account.client_id} is locked, skipping")
            return ProcessingResult.REJECTED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)
            case _:
                return ProcessingResult.REJECTED

    def account(self, client_id: int) -> Optional[ClientAccount]:
        """Look up an account without creating it."""
        return self._accounts.get(client_id)

    def accounts(self) -> Dict[int, ClientAccount]:
        """Accounts that moved away from their default state, in ascending client id order."""
        return {
            client_id: self._accounts[client_id]
            for client_id in sorted(self._accounts)
            if not self._accounts[client_id].is_default()
        }

    def _get_or_create_account(self, client_id: int) -> ClientAccount:
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            logger.warning(f"Deposit tx {transaction.transaction_id}: missing amount")
            return ProcessingResult.REJECTED

        if self._config.strict_disputes:
            if transaction.amount <= 0:
                logger.warning(f"Deposit tx {transaction.transaction_id}: invalid amount {transaction.amount}")
                return ProcessingResult.REJECTED
            if transaction.transaction_id in self._history:
                logger.info(f"Deposit tx {transaction.transaction_id}: already recorded, skipping")
                return ProcessingResult.REJECTED

        account.credit(transaction.amount)
        if not self._history.record_deposit(transaction.transaction_id, transaction.amount, account.client_id):
            logger.warning(f"Deposit tx {transaction.transaction_id}: id reused, history keeps the first deposit")
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: missing amount")
            return ProcessingResult.REJECTED

        if self._config.strict_disputes and transaction.amount <= 0:
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return ProcessingResult.REJECTED

        if account.available < transaction.amount:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: insufficient funds for client {account.client_id}")
            return ProcessingResult.REJECTED

        account.debit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry = self._find_entry(transaction)
        if entry is None:
            return ProcessingResult.REJECTED

        if self._config.strict_disputes:
            if entry.state not in (DisputeState.DEPOSITED, DisputeState.RESOLVED):
                logger.warning(f"Dispute for tx {transaction.transaction_id}: transaction is {entry.state.value}")
                return ProcessingResult.REJECTED
            entry.state = DisputeState.DISPUTED

        account.hold(entry.amount)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry = self._find_entry(transaction)
        if entry is None:
            return ProcessingResult.REJECTED

        if self._config.strict_disputes:
            if entry.state != DisputeState.DISPUTED:
                logger.info(f"Resolve for tx {transaction.transaction_id}: no open dispute ({entry.state.value})")
                return ProcessingResult.REJECTED
            entry.state = DisputeState.RESOLVED

        account.release_hold(entry.amount)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry = self._find_entry(transaction)
        if entry is None:
            return ProcessingResult.REJECTED

        if self._config.strict_disputes:
            if entry.state != DisputeState.DISPUTED:
                logger.info(f"Chargeback for tx {transaction.transaction_id}: no open dispute ({entry.state.value})")
                return ProcessingResult.REJECTED
            entry.state = DisputeState.CHARGED_BACK

        account.charge_back(entry.amount)
        return ProcessingResult.APPLIED

    def _find_entry(self, transaction: Transaction) -> Optional[LedgerEntry]:
        """History entry referenced by a dispute, resolve or chargeback."""
        kind = transaction.transaction_type.value.capitalize()
        entry = self._history.get_entry(transaction.transaction_id)

        if entry is None:
            logger.info(f"{kind} for tx {transaction.transaction_id}: unknown transaction")
            return None

        if self._config.strict_disputes and entry.client_id != transaction.client_id:
            logger.warning(f"{kind} for tx {transaction.transaction_id}: client mismatch (expected {entry.client_id}, got {transaction.client_id})")
            return None

        return entry
