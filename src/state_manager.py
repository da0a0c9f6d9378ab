from typing import Dict, List, Optional

from ledger_models import ClientAccount, StoredTransaction


class StateManager:
    """
    Account and transaction tables owned by a single engine.
    Stores client accounts and the deposits/withdrawals that disputes may reference.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, StoredTransaction] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Retrieve an existing account, None if the client has never been seen."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, transaction_id: int, transaction: StoredTransaction) -> None:
        """Store transaction for future dispute lookups. Overwrites an earlier entry with the same id."""
        self._transactions[transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[StoredTransaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def remove_transaction(self, transaction_id: int) -> None:
        """Forget a transaction once its dispute has been settled."""
        self._transactions.pop(transaction_id, None)

    def get_all_accounts(self) -> List[ClientAccount]:
        """Return all accounts (for final output)."""
        return list(self._accounts.values())
