import argparse
import logging
import os
import sys
from typing import List, Optional

from engine import PaymentsEngine
from models import MalformedRecordError
from writer import write_accounts

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"


def default_log_level() -> str:
    level = os.environ.get(LOG_LEVEL_ENV, "info").lower()
    return level if level in LOG_LEVELS else "info"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments",
        description="Apply a CSV stream of transactions to client accounts and print the final balances.",
    )
    parser.add_argument("input", help="path to the transactions CSV file")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=default_log_level(),
        help=f"diagnostic verbosity on stderr (default: info, or ${LOG_LEVEL_ENV})",
    )
    parser.add_argument(
        "--skip-malformed",
        action="store_true",
        help="log and skip rows that cannot be decoded instead of aborting",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    engine = PaymentsEngine(skip_malformed=args.skip_malformed)
    try:
        accounts = engine.process_file(args.input)
    except MalformedRecordError as e:
        logger.error(f"Malformed input: {e}")
        return 1
    except OSError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
