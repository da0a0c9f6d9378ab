import logging
from dataclasses import replace
from typing import Iterable, List

from ledger_csv import read_transactions
from ledger_models import ClientAccount, ProcessingResult, ProcessingStats, Transaction
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Ledger engine: owns all account and transaction state for one run.
    Transactions are applied one at a time, in the order they are received.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """Apply a single transaction. Never raises for transactions that cannot be applied."""
        result = self._processor.process_transaction(transaction)
        self._stats.record(result)
        if not result.applied:
            logger.debug(f"Skipped {transaction}: {result.skip_reason.value}")
        return result

    def snapshot(self) -> List[ClientAccount]:
        """Return copies of every account seen so far, in no particular order."""
        return [replace(account) for account in self._state.get_all_accounts()]

    def process_transactions(self, transactions: Iterable[Transaction]) -> List[ClientAccount]:
        """Apply a stream of transactions in order and return final account states."""
        for transaction in transactions:
            self.apply(transaction)
        return self.snapshot()

    def process_file(self, filepath: str) -> List[ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")

        accounts = self.process_transactions(
            read_transactions(filepath, on_parse_failure=lambda line_num: self._stats.record_parse_failure())
        )

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Skipped: {self._stats.skipped}, "
            f"Parse failures: {self._stats.parse_failures}"
        )
        for reason, count in self._stats.skip_reasons.most_common():
            logger.info(f"  {reason.value}: {count}")

        return accounts
