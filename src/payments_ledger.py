import logging
import os
import sys
from typing import List, Optional

from ledger_csv import write_accounts
from payments_engine import PaymentsEngine

DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging() -> None:
    """Send diagnostics to stderr at the level named by PAYMENTS_LOG_LEVEL."""
    level_name = os.environ.get("PAYMENTS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.getLevelName(DEFAULT_LOG_LEVEL)

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-ledger <input.csv>", file=sys.stderr)
        return 1

    configure_logging()

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        print(f"Error reading {filepath}: {e}", file=sys.stderr)
        return 1

    try:
        write_accounts(accounts, sys.stdout)
        sys.stdout.flush()
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
