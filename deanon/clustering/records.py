"""Flat transaction-record format.

Each line of a transaction file describes one side of a transaction:

    <transactionId> <txHash> <address> <amount> <direction>

where ``direction`` is ``in`` (the address funds the transaction) or ``out``
(the address receives ``amount`` from it). Amounts are integers in the
smallest currency unit (satoshi).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from deanon.clustering.errors import MalformedRecordError

logger = logging.getLogger(__name__)

FIELD_COUNT = 5


class Direction(Enum):
    """Which side of a transaction a record describes."""

    INPUT = "in"
    OUTPUT = "out"


@dataclass(frozen=True)
class TransactionRecord:
    """One input or output line of a transaction.

    Attributes:
        transaction_id: Transaction identifier used for grouping
        tx_hash: Transaction hash
        address: Address funding (input) or receiving (output)
        amount: Value in satoshi
        direction: Direction.INPUT or Direction.OUTPUT
        line_number: Source line, for error messages only (not compared)
    """

    transaction_id: str
    tx_hash: str
    address: str
    amount: int
    direction: Direction
    line_number: int | None = field(default=None, compare=False, repr=False)

    @property
    def is_input(self) -> bool:
        return self.direction is Direction.INPUT

    @property
    def is_output(self) -> bool:
        return self.direction is Direction.OUTPUT


def _parse_direction(token: str, line: str, line_number: int | None) -> Direction:
    if token == Direction.INPUT.value:
        return Direction.INPUT
    if token == Direction.OUTPUT.value:
        return Direction.OUTPUT
    raise MalformedRecordError(f"read {token!r} as in/out", line, line_number)


def _parse_amount(token: str, line: str, line_number: int | None) -> int:
    # int() alone would accept "+5", "-0" and non-ASCII digits
    if not (token.isascii() and token.isdigit()):
        raise MalformedRecordError(
            f"amount {token!r} is not a non-negative integer", line, line_number
        )
    return int(token)


def parse_record(line: str, line_number: int | None = None) -> TransactionRecord:
    """Parse a single record line.

    Args:
        line: Whitespace-delimited record text
        line_number: 1-based source line, used in error messages

    Returns:
        Parsed TransactionRecord

    Raises:
        MalformedRecordError: Too few fields, bad amount or bad direction token
    """
    parts = line.split()
    if len(parts) < FIELD_COUNT:
        raise MalformedRecordError(
            f"expected {FIELD_COUNT} fields, got {len(parts)}", line, line_number
        )

    transaction_id, tx_hash, address, amount_token, direction_token = parts[
        :FIELD_COUNT
    ]
    return TransactionRecord(
        transaction_id=transaction_id,
        tx_hash=tx_hash,
        address=address,
        amount=_parse_amount(amount_token, line, line_number),
        direction=_parse_direction(direction_token, line, line_number),
        line_number=line_number,
    )


def _decode(raw: bytes, line_number: int) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedRecordError(
            f"invalid UTF-8 at byte {e.start}",
            raw.decode("utf-8", errors="replace").rstrip("\r\n"),
            line_number,
        ) from e


def parse_records(lines: Iterable[str | bytes]) -> Iterator[TransactionRecord]:
    """Yield one record per non-blank line, in order.

    Lines may be text or raw UTF-8 bytes. Line numbers start at 1 and count
    blank lines, so error messages point at the physical line in the file.
    """
    for line_number, line in enumerate(lines, start=1):
        if isinstance(line, bytes):
            line = _decode(line, line_number)
        if not line.strip():
            continue
        yield parse_record(line.rstrip("\r\n"), line_number)


def read_transactions(path: str | Path) -> list[TransactionRecord]:
    """Read every record from a transaction file.

    Raises:
        MalformedRecordError: On the first unparseable line
        OSError: If the file cannot be opened or read
    """
    # Binary mode so undecodable lines surface with their line number
    with open(path, "rb") as f:
        records = list(parse_records(f))

    logger.info(f"Read {len(records):,} transaction records from {path}")
    return records
