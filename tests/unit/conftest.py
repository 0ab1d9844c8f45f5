"""Shared fixtures for unit tests."""

from typing import Any

import pytest

from core.exceptions import OutOfSpaceError, RecordAlreadyExistsError, RecordNotFoundError
from domain.entities.address import Address
from domain.entities.record import RecordHandle
from domain.services.address_deriver import AddressDeriver
from domain.services.record_authority import RecordAuthority

DEPOSIT_PER_BYTE = 10


class FakeRecordStore:
    """In-memory keyed store with tombstones for closed addresses."""

    def __init__(self, max_record_size: int = 10240) -> None:
        self.records: dict[Address, bytes] = {}
        self.deposits: dict[Address, int] = {}
        self.closed: set[Address] = set()
        self.refunds: list[tuple[Address, int]] = []
        self.max_record_size = max_record_size

    async def get(self, address: Address) -> RecordHandle | None:
        if address not in self.records:
            return None
        return RecordHandle(address, len(self.records[address]), self.deposits[address])

    async def create(self, address: Address, size: int, payer: Address) -> RecordHandle:
        if address in self.records or address in self.closed:
            raise RecordAlreadyExistsError(str(address))
        if size > self.max_record_size:
            raise OutOfSpaceError(size, self.max_record_size)
        self.records[address] = bytes(size)
        self.deposits[address] = size * DEPOSIT_PER_BYTE
        return RecordHandle(address, size, self.deposits[address])

    async def read(self, handle: RecordHandle) -> bytes:
        if handle.address not in self.records:
            raise RecordNotFoundError(str(handle.address))
        return self.records[handle.address]

    async def write(self, handle: RecordHandle, data: bytes) -> None:
        if handle.address not in self.records:
            raise RecordNotFoundError(str(handle.address))
        self.records[handle.address] = data.ljust(handle.size, b"\x00")

    async def close(self, handle: RecordHandle, refund_to: Address) -> int:
        if handle.address not in self.records:
            raise RecordNotFoundError(str(handle.address))
        del self.records[handle.address]
        refund = self.deposits.pop(handle.address)
        self.closed.add(handle.address)
        self.refunds.append((refund_to, refund))
        return refund


class FakeUnitOfWork:
    """Fake Unit of Work over a shared FakeRecordStore."""

    def __init__(self, records: FakeRecordStore) -> None:
        self.records = records
        self.commits = 0
        self.rolled_back = False

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type:
            await self.rollback()


@pytest.fixture
def store() -> FakeRecordStore:
    """A fresh, empty record store."""
    return FakeRecordStore()


@pytest.fixture
def uow(store: FakeRecordStore) -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork(store)


@pytest.fixture
def authority(uow: FakeUnitOfWork, deriver: AddressDeriver) -> RecordAuthority:
    return RecordAuthority(lambda: uow, deriver)
