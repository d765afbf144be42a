from dataclasses import dataclass
from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow
from enum import Enum
from typing import Optional

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

AMOUNT_PLACES = 4
MAX_AMOUNT = Decimal(10) ** 28

# Wide enough for MAX_AMOUNT times every possible tx id at AMOUNT_PLACES; losing a digit is an error
LEDGER_CONTEXT = Context(prec=50, traps=[InvalidOperation, Inexact, Overflow])


class MalformedRecordError(ValueError):
    """Raised when an input record cannot be decoded into a Transaction."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def _has_extra_places(amount: Decimal) -> bool:
    """True if any non-zero digit sits beyond AMOUNT_PLACES fractional digits."""
    _, digits, exponent = amount.as_tuple()
    if exponent >= -AMOUNT_PLACES:
        return False
    return any(digits[exponent + AMOUNT_PLACES:])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def requires_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    SUCCESS = "success"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if not isinstance(self.transaction_type, TransactionType):
            raise MalformedRecordError(f"unknown transaction type {self.transaction_type!r}")
        if not 0 <= self.client_id <= MAX_CLIENT_ID:
            raise MalformedRecordError(f"client id {self.client_id} out of range")
        if not 0 <= self.transaction_id <= MAX_TRANSACTION_ID:
            raise MalformedRecordError(f"tx id {self.transaction_id} out of range")

        if self.transaction_type.requires_amount:
            if self.amount is None:
                raise MalformedRecordError(f"{self.transaction_type.value} tx {self.transaction_id} requires an amount")
            if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
                raise MalformedRecordError(f"tx {self.transaction_id}: invalid amount {self.amount!r}")
            if self.amount < 0:
                raise MalformedRecordError(f"tx {self.transaction_id}: negative amount {self.amount}")
            if self.amount >= MAX_AMOUNT:
                raise MalformedRecordError(f"tx {self.transaction_id}: amount {self.amount} too large")
            if _has_extra_places(self.amount):
                raise MalformedRecordError(f"tx {self.transaction_id}: amount {self.amount} has more than {AMOUNT_PLACES} decimal places")
        elif self.amount is not None:
            raise MalformedRecordError(f"{self.transaction_type.value} tx {self.transaction_id} must not carry an amount")

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return LEDGER_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)
        self.held = LEDGER_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)
        self.available = LEDGER_CONTEXT.add(self.available, amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)

    def lock(self) -> None:
        self.locked = True

    def __str__(self) -> str:
        return f"{self.available},{self.held},{self.total},{str(self.locked).lower()}"


@dataclass
class DisputeRecord:
    """What the ledger remembers about a deposit so it can be disputed later."""

    client_id: int
    amount: Decimal
    state: DisputeState = DisputeState.UNDISPUTED


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.ignored = 0
        self.malformed = 0

    def record_success(self):
        self.processed += 1

    def record_ignored(self):
        self.ignored += 1

    def record_malformed(self):
        self.malformed += 1

    def __str__(self) -> str:
        return f"Processed: {self.processed}, Ignored: {self.ignored}, Malformed: {self.malformed}"
