"""Dense integer handles for addresses.

The union-find works on integers only, so every distinct address gets a
handle in ``[0, N)``. Handles follow first-seen order in the record stream,
which makes the mapping reproducible for a given input file.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from deanon.clustering.errors import UnknownAddressError
from deanon.clustering.records import TransactionRecord


class AddressIndex:
    """Bijection between address strings and integer handles."""

    def __init__(self, addresses: Iterable[str]) -> None:
        # dict.fromkeys dedupes while keeping first-seen order
        self._addresses: tuple[str, ...] = tuple(dict.fromkeys(addresses))
        self._handles: dict[str, int] = {
            address: handle for handle, address in enumerate(self._addresses)
        }

    @classmethod
    def from_records(cls, records: Iterable[TransactionRecord]) -> AddressIndex:
        """Index every address that appears in the records (inputs and outputs)."""
        return cls(record.address for record in records)

    @property
    def addresses(self) -> tuple[str, ...]:
        """All addresses in handle order."""
        return self._addresses

    def handle_of(self, address: str) -> int:
        try:
            return self._handles[address]
        except KeyError:
            raise UnknownAddressError(address) from None

    def address_of(self, handle: int) -> str:
        if handle < 0:
            raise IndexError(f"handle {handle} out of range")
        return self._addresses[handle]

    def __contains__(self, address: object) -> bool:
        return address in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)
