"""Keyed record store protocol."""

from typing import Protocol

from domain.entities.address import Address
from domain.entities.record import RecordHandle


class IRecordStore(Protocol):
    """Repository interface for the external keyed store.

    The store allocates space at an address, charges a deposit to the payer
    and refunds it on close. A closed address is never allocated again.
    """

    async def get(self, address: Address) -> RecordHandle | None:
        """Resolve a live record at an address."""
        ...

    async def create(self, address: Address, size: int, payer: Address) -> RecordHandle:
        """Allocate a zeroed record. Raises if the address was ever used."""
        ...

    async def read(self, handle: RecordHandle) -> bytes:
        """Read the full record bytes."""
        ...

    async def write(self, handle: RecordHandle, data: bytes) -> None:
        """Overwrite the record bytes."""
        ...

    async def close(self, handle: RecordHandle, refund_to: Address) -> int:
        """Release the record and return the refunded deposit."""
        ...
