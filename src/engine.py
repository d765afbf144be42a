import logging
from typing import Iterable, Iterator, List, TextIO

from models import ClientAccount, MalformedRecordError, ProcessingResult, ProcessingStats, Transaction
from processor import TransactionProcessor
from reader import parse_row, read_rows, read_transactions
from state import StateManager

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Applies an ordered stream of transactions to per-client accounts.

    Transactions are applied one at a time, strictly in input order. Each engine
    owns its own ledger state, so a fresh engine starts from empty accounts.
    """

    def __init__(self, skip_malformed: bool = False):
        self._skip_malformed = skip_malformed
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self.stats = ProcessingStats()

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """Apply a single well-formed transaction to the ledger."""
        if logger.isEnabledFor(logging.DEBUG):
            account = self._state.get_or_create_account(transaction.client_id)
            logger.debug(f"Account before: {account}, tx: {transaction!r}")

        result = self._processor.process_transaction(transaction)

        if result == ProcessingResult.SUCCESS:
            self.stats.record_success()
        else:
            self.stats.record_ignored()

        if logger.isEnabledFor(logging.DEBUG):
            account = self._state.get_or_create_account(transaction.client_id)
            logger.debug(f"Account after: {account}")
        return result

    def apply_all(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self.apply(transaction)

    def accounts(self) -> List[ClientAccount]:
        """Snapshot of every account, ordered by client id."""
        return self._state.get_all_accounts()

    def process_stream(self, stream: TextIO) -> List[ClientAccount]:
        """Process a CSV stream and return final account states."""
        if self._skip_malformed:
            self.apply_all(self._read_skipping_malformed(stream))
        else:
            self.apply_all(read_transactions(stream))

        logger.info(str(self.stats))
        return self.accounts()

    def process_file(self, filepath: str) -> List[ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        # Under the skip policy undecodable bytes become U+FFFD and fail row validation instead
        errors = "replace" if self._skip_malformed else "strict"
        with open(filepath, "r", newline="", encoding="utf-8", errors=errors) as f:
            return self.process_stream(f)

    def _read_skipping_malformed(self, stream: TextIO) -> Iterator[Transaction]:
        """Like read_transactions, but logs and drops rows that fail to decode."""
        for line_number, row in read_rows(stream):
            try:
                yield parse_row(row, line_number)
            except MalformedRecordError as e:
                self.stats.record_malformed()
                logger.warning(f"Skipping malformed record: {e}")
