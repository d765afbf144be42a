import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO, Tuple

from models import MalformedRecordError, Transaction, TransactionType

FIELDNAMES = ("type", "client", "tx", "amount")


def parse_id(name: str, value: str, line_number: Optional[int] = None) -> int:
    """Parse a client or tx id: plain ASCII digits only."""
    if not (value.isascii() and value.isdigit()):
        raise MalformedRecordError(f"invalid {name} id {value!r}", line_number)
    return int(value)


def parse_row(row: Dict[str, Optional[str]], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise MalformedRecordError(f"too many fields: {row}", line_number)

    normalized = {k.strip().lower(): (v or "").strip() for k, v in row.items()}
    try:
        transaction_type = TransactionType(normalized["type"].lower())
    except ValueError:
        raise MalformedRecordError(f"unknown transaction type {normalized['type']!r}", line_number)

    client_id = parse_id("client", normalized["client"], line_number)
    transaction_id = parse_id("tx", normalized["tx"], line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise MalformedRecordError(f"invalid amount {amount_str!r}", line_number)

    try:
        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except MalformedRecordError as e:
        raise MalformedRecordError(str(e), line_number)


def read_rows(stream: TextIO) -> Iterator[Tuple[int, Dict[str, Optional[str]]]]:
    """
    Yield (line number, raw row) pairs, skipping blank rows. Validates the header first.
    Undecodable bytes and broken CSV quoting end the stream with MalformedRecordError.
    """
    reader = csv.DictReader(stream, skipinitialspace=True)
    try:
        fieldnames = reader.fieldnames
    except (UnicodeDecodeError, csv.Error) as e:
        raise MalformedRecordError(f"unreadable header: {e}", reader.line_num or 1)
    if fieldnames is None:
        return

    header = [name.strip().lower() for name in fieldnames]
    missing = [name for name in FIELDNAMES[:3] if name not in header]
    if missing:
        raise MalformedRecordError(f"header is missing columns {missing}", reader.line_num)

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except (UnicodeDecodeError, csv.Error) as e:
            raise MalformedRecordError(f"unreadable row: {e}", reader.line_num + 1)

        if not any((value or "").strip() for key, value in row.items() if key is not None):
            continue
        yield reader.line_num, row


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Lazily decode transactions from a CSV stream with a `type, client, tx, amount` header.
    Raises MalformedRecordError on the first row that cannot be decoded.
    """
    for line_number, row in read_rows(stream):
        yield parse_row(row, line_number)
