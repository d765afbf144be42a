import logging
from typing import Optional

from models import ClientAccount, DisputeRecord, DisputeState, ProcessingResult, Transaction, TransactionType
from state import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against ledger state.
    Returns ProcessingResult to indicate whether the transaction took effect.
    Rule violations are never raised: the transaction is ignored and the ledger is left untouched.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the account
            IGNORED: Rejected by a business rule (locked account, insufficient funds,
                     duplicate tx id, unknown/foreign/wrong-state dispute reference)
        """
        account = self._state.get_or_create_account(transaction.client_id)

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

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if account.locked:
            logger.info(f"Deposit tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.IGNORED

        if self._state.is_transaction_used(transaction.transaction_id):
            logger.info(f"Deposit tx {transaction.transaction_id}: duplicate transaction id, skipping")
            return ProcessingResult.IGNORED

        account.credit(transaction.amount)
        self._state.mark_transaction_used(transaction.transaction_id)
        self._state.store_deposit(transaction)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if account.locked:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.IGNORED

        if self._state.is_transaction_used(transaction.transaction_id):
            logger.info(f"Withdrawal tx {transaction.transaction_id}: duplicate transaction id, skipping")
            return ProcessingResult.IGNORED

        if account.available < transaction.amount:
            logger.info(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return ProcessingResult.IGNORED

        account.debit(transaction.amount)
        self._state.mark_transaction_used(transaction.transaction_id)
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        record = self._find_record(transaction, DisputeState.UNDISPUTED)
        if record is None:
            return ProcessingResult.IGNORED

        account.hold(record.amount)
        self._state.set_dispute_state(transaction.transaction_id, DisputeState.DISPUTED)
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        record = self._find_record(transaction, DisputeState.DISPUTED)
        if record is None:
            return ProcessingResult.IGNORED

        account.release_hold(record.amount)
        self._state.set_dispute_state(transaction.transaction_id, DisputeState.RESOLVED)
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        record = self._find_record(transaction, DisputeState.DISPUTED)
        if record is None:
            return ProcessingResult.IGNORED

        account.remove_held(record.amount)
        account.lock()
        self._state.set_dispute_state(transaction.transaction_id, DisputeState.CHARGED_BACK)
        return ProcessingResult.SUCCESS

    def _find_record(self, transaction: Transaction, expected: DisputeState) -> Optional[DisputeRecord]:
        """Look up the deposit a dispute-family transaction refers to, if it may move to the next state."""
        kind = transaction.transaction_type.value.capitalize()
        record = self._state.get_dispute_record(transaction.transaction_id)

        # Withdrawals never get a dispute record, so they land here too
        if record is None:
            logger.info(f"{kind} for tx {transaction.transaction_id}: no disputable deposit with this id")
            return None

        if record.client_id != transaction.client_id:
            logger.warning(
                f"{kind} for tx {transaction.transaction_id}: client mismatch "
                f"(expected {record.client_id}, got {transaction.client_id})"
            )
            return None

        if record.state != expected:
            logger.info(f"{kind} for tx {transaction.transaction_id}: transaction is {record.state.value}")
            return None

        return record
