import logging
from decimal import Decimal
from typing import Tuple, Union

from ledger_models import ClientAccount, ProcessingResult, SkipReason, StoredTransaction, Transaction, TransactionType
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Processes transactions against state.
    Returns ProcessingResult to indicate whether the transaction was applied or why it was skipped.
    A skipped transaction leaves state untouched.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            ProcessingResult.success() when every state change was made,
            ProcessingResult.skipped(reason) when none were.
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                logger.warning(f"Unknown transaction type: {transaction.type_name!r} (tx {transaction.transaction_id})")
                return ProcessingResult.skipped(SkipReason.UNKNOWN_TYPE)

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_or_create_account(transaction.client_id)
        amount = _amount_of(transaction)

        if account.locked:
            logger.info(f"Deposit tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.skipped(SkipReason.ACCOUNT_LOCKED)

        account.credit(amount)
        self._state.store_transaction(
            transaction.transaction_id,
            StoredTransaction(client_id=transaction.client_id, amount=amount),
        )
        return ProcessingResult.success()

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_account(transaction.client_id)
        amount = _amount_of(transaction)

        if account is None:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: no account for client {transaction.client_id}")
            return ProcessingResult.skipped(SkipReason.ACCOUNT_NOT_FOUND)

        if account.locked:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.skipped(SkipReason.ACCOUNT_LOCKED)

        if account.available < amount:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({account.available} < {amount})")
            return ProcessingResult.skipped(SkipReason.INSUFFICIENT_FUNDS)

        account.debit(amount)
        self._state.store_transaction(
            transaction.transaction_id,
            StoredTransaction(client_id=transaction.client_id, amount=amount),
        )
        return ProcessingResult.success()

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        lookup = self._lookup_referenced(transaction)
        if isinstance(lookup, ProcessingResult):
            return lookup
        original, account = lookup

        if original.disputed:
            logger.warning(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return ProcessingResult.skipped(SkipReason.ALREADY_DISPUTED)

        # Available may go negative if the disputed funds were already spent.
        account.hold(original.amount)
        original.disputed = True
        return ProcessingResult.success()

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        lookup = self._lookup_referenced(transaction)
        if isinstance(lookup, ProcessingResult):
            return lookup
        original, account = lookup

        if not original.disputed:
            logger.warning(f"Resolve for tx {transaction.transaction_id}: transaction is not disputed")
            return ProcessingResult.skipped(SkipReason.NOT_DISPUTED)

        account.release_hold(original.amount)
        self._state.remove_transaction(transaction.transaction_id)
        return ProcessingResult.success()

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        lookup = self._lookup_referenced(transaction)
        if isinstance(lookup, ProcessingResult):
            return lookup
        original, account = lookup

        if not original.disputed:
            logger.warning(f"Chargeback for tx {transaction.transaction_id}: transaction is not disputed")
            return ProcessingResult.skipped(SkipReason.NOT_DISPUTED)

        account.charge_back(original.amount)
        self._state.remove_transaction(transaction.transaction_id)
        return ProcessingResult.success()

    def _lookup_referenced(
        self, transaction: Transaction
    ) -> Union[ProcessingResult, Tuple[StoredTransaction, ClientAccount]]:
        """
        Find the stored transaction a dispute/resolve/chargeback points at, and its owner's account.
        Returns a skipped ProcessingResult if there is nothing to act on.
        """
        kind = transaction.transaction_type.value.capitalize()
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            logger.info(f"{kind} for tx {transaction.transaction_id}: transaction not found")
            return ProcessingResult.skipped(SkipReason.TRANSACTION_NOT_FOUND)

        if original.client_id != transaction.client_id:
            logger.warning(f"{kind} for tx {transaction.transaction_id}: client mismatch (expected {original.client_id}, got {transaction.client_id})")
            return ProcessingResult.skipped(SkipReason.CLIENT_MISMATCH)

        account = self._state.get_account(original.client_id)
        if account is None:
            return ProcessingResult.skipped(SkipReason.ACCOUNT_NOT_FOUND)

        return original, account


def _amount_of(transaction: Transaction) -> Decimal:
    return transaction.amount if transaction.amount is not None else Decimal("0")
