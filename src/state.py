from dataclasses import replace
from typing import Dict, List, Optional, Set

from models import ClientAccount, DisputeRecord, DisputeState, Transaction


class StateManager:
    """
    Ledger state for a single run.
    Stores client accounts and deposit history for dispute lookups.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._dispute_records: Dict[int, DisputeRecord] = {}
        self._used_transaction_ids: Set[int] = set()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def is_transaction_used(self, transaction_id: int) -> bool:
        """Check if a deposit or withdrawal has already been applied under this id."""
        return transaction_id in self._used_transaction_ids

    def mark_transaction_used(self, transaction_id: int) -> None:
        self._used_transaction_ids.add(transaction_id)

    def store_deposit(self, transaction: Transaction) -> None:
        """Remember a deposit so that later disputes can reference it."""
        self._dispute_records[transaction.transaction_id] = DisputeRecord(
            client_id=transaction.client_id,
            amount=transaction.amount,
        )

    def get_dispute_record(self, transaction_id: int) -> Optional[DisputeRecord]:
        return self._dispute_records.get(transaction_id)

    def set_dispute_state(self, transaction_id: int, state: DisputeState) -> None:
        self._dispute_records[transaction_id].state = state

    def get_all_accounts(self) -> List[ClientAccount]:
        """Return copies of all accounts ordered by client id (for final output)."""
        return [replace(self._accounts[client_id]) for client_id in sorted(self._accounts)]
