import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterable, Iterator, Optional, TextIO

from ledger_models import ClientAccount, Transaction, TransactionType

logger = logging.getLogger(__name__)

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


def read_transactions(
    filepath: str,
    on_parse_failure: Optional[Callable[[int], None]] = None,
) -> Iterator[Transaction]:
    """
    Lazily read transactions from a CSV file with a `type, client, tx, amount` header.
    Rows that fail to parse are logged and skipped; the callback, if given, gets the line number of each.
    Undecodable bytes become U+FFFD, so they fail only the row they appear in.
    """
    with open(filepath, "r", newline="", encoding="utf-8-sig", errors="replace") as f:
        reader = csv.DictReader(f, skipinitialspace=True)
        while True:
            try:
                row = next(reader)
            except StopIteration:
                return
            except csv.Error as e:
                logger.warning(f"Failed to read line {reader.line_num}: {e}")
                transaction = None
            else:
                transaction = parse_csv_row(row)

            if transaction is not None:
                yield transaction
            elif on_parse_failure is not None:
                on_parse_failure(reader.line_num)


def parse_csv_row(row: Dict[str, str]) -> Optional[Transaction]:
    """Parse CSV row into Transaction. Returns None if the row is malformed."""
    try:
        # DictReader puts surplus cells under a None key and fills short rows with None
        normalized = {
            k.strip(): (v or "").strip()
            for k, v in row.items()
            if k is not None
        }

        type_name = normalized["type"]
        client_id = _parse_id(normalized["client"])
        transaction_id = _parse_id(normalized["tx"])

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = Decimal(amount_str)
            if not amount.is_finite():
                raise ValueError(f"amount must be finite, got {amount_str!r}")

        transaction_type = TransactionType.from_str(type_name)
        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
            type_name=type_name if transaction_type == TransactionType.UNKNOWN else None,
        )
    except (KeyError, ValueError, TypeError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e!r}")
        return None


def _parse_id(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise ValueError(f"id must be unsigned, got {value!r}")
    return parsed


def format_decimal(value: Decimal) -> str:
    """Format decimal without trailing zeros, keeping at least one fractional digit."""
    formatted = f"{value.normalize():f}"
    if "." not in formatted:
        formatted += ".0"
    return formatted


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    """Write the account table as CSV, one row per client ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for account in sorted(accounts, key=lambda a: a.client_id):
        writer.writerow([
            account.client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
