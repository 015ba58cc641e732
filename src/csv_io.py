import csv
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from config import AMOUNT_CONTEXT, AMOUNT_MAX, AMOUNT_PLACES, AMOUNT_QUANTUM, MAX_CLIENT_ID, MAX_TX_ID
from exceptions import TransactionParseError
from models import ClientAccount, Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")

ID_PATTERN = re.compile(r"[0-9]+")
AMOUNT_PATTERN = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Decode a transactions CSV (with header row) one record at a time.

    Raises TransactionParseError on the first malformed row.
    """
    reader = csv.DictReader(stream)
    try:
        if reader.fieldnames is None:
            return

        header = [name.strip().lower() for name in reader.fieldnames]
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise TransactionParseError(f"header is missing column(s): {', '.join(missing)}", line_number=1)
        reader.fieldnames = header

        for row in reader:
            transaction = parse_row(row, line_number=reader.line_num)
            logger.debug(f"Parsed {transaction}")
            yield transaction
    except csv.Error as e:
        raise TransactionParseError(f"malformed CSV: {e}", reader.line_num)
    except UnicodeDecodeError as e:
        raise TransactionParseError(f"input is not valid UTF-8: {e}")


def parse_row(row: Dict[Optional[str], object], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise TransactionParseError(f"too many fields: {row[None]}", line_number)

    normalized = {key: value.strip() for key, value in row.items() if value is not None}

    try:
        transaction_type = TransactionType(normalized.get("type", "").lower())
    except ValueError:
        raise TransactionParseError(f"unknown transaction type {normalized.get('type')!r}", line_number)

    client_id = _parse_id(normalized.get("client", ""), "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized.get("tx", ""), "tx", MAX_TX_ID, line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        amount = parse_amount(amount_str, line_number)
    elif transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
        raise TransactionParseError(f"{transaction_type.value} tx {transaction_id} has no amount", line_number)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def parse_amount(text: str, line_number: Optional[int] = None) -> Decimal:
    """Parse a decimal amount with at most AMOUNT_PLACES fractional digits."""
    if not AMOUNT_PATTERN.fullmatch(text):
        raise TransactionParseError(f"invalid amount {text!r}", line_number)

    try:
        amount = Decimal(text)
        if abs(amount) > AMOUNT_MAX:
            raise TransactionParseError(f"amount {text!r} exceeds {AMOUNT_MAX}", line_number)
        if amount != amount.quantize(AMOUNT_QUANTUM):
            raise TransactionParseError(f"amount {text!r} has more than {AMOUNT_PLACES} decimal places", line_number)
    except InvalidOperation:
        raise TransactionParseError(f"invalid amount {text!r}", line_number)
    return amount


def _parse_id(text: str, field: str, upper_bound: int, line_number: Optional[int]) -> int:
    if not ID_PATTERN.fullmatch(text) or len(text.lstrip("0")) > len(str(upper_bound)):
        raise TransactionParseError(f"invalid {field} id {text[:20]!r}", line_number)
    value = int(text)
    if value > upper_bound:
        raise TransactionParseError(f"{field} id {value} out of range 0..{upper_bound}", line_number)
    return value


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly AMOUNT_PLACES fractional digits."""
    return f"{value.quantize(AMOUNT_QUANTUM, context=AMOUNT_CONTEXT):f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ])
