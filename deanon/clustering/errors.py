"""Exceptions raised by the clustering pipeline.

Parse errors abort the whole run. Graph errors abort graph construction only;
cluster maps written before the failure stay valid.
"""

from __future__ import annotations


class ClusteringError(Exception):
    """Base class for all clustering pipeline errors."""


class MalformedRecordError(ClusteringError):
    """Raised when a transaction record line cannot be parsed."""

    def __init__(self, reason: str, line: str, line_number: int | None = None):
        self.reason = reason
        self.line = line
        self.line_number = line_number
        location = f"line {line_number}" if line_number is not None else "record"
        super().__init__(f"Malformed {location}: {reason} ({line!r})")


class UnknownAddressError(ClusteringError, KeyError):
    """Raised when an address was never assigned to a cluster."""

    def __init__(
        self,
        address: str,
        transaction_id: str | None = None,
        line_number: int | None = None,
    ):
        self.address = address
        self.transaction_id = transaction_id
        self.line_number = line_number
        message = f"Address {address} is not in the key map"
        if transaction_id is not None:
            message += f" (tx {transaction_id}"
            if line_number is not None:
                message += f", line {line_number}"
            message += ")"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class MissingInputClusterError(ClusteringError):
    """Raised when an output's transaction has no resolved input cluster."""

    def __init__(self, transaction_id: str, line_number: int | None = None):
        self.transaction_id = transaction_id
        self.line_number = line_number
        message = f"Did not find input transaction for tx {transaction_id}"
        if line_number is not None:
            message += f" (line {line_number})"
        super().__init__(message)
