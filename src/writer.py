import csv
from decimal import ROUND_HALF_EVEN, Context, Decimal
from typing import Iterable, TextIO

from models import LEDGER_CONTEXT, ClientAccount

HEADER = ("client", "available", "held", "total", "locked")
FOUR_PLACES = Decimal("0.0001")
OUTPUT_CONTEXT = Context(prec=LEDGER_CONTEXT.prec, rounding=ROUND_HALF_EVEN)


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    return f"{value.quantize(FOUR_PLACES, context=OUTPUT_CONTEXT):f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ])
