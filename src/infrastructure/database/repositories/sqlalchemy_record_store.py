"""SQLAlchemy implementation of the keyed record store."""

from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import OutOfSpaceError, RecordAlreadyExistsError, RecordNotFoundError
from domain.entities.address import Address
from domain.entities.record import RecordHandle
from infrastructure.database.models import RecordModel

logger = structlog.get_logger()


class SQLAlchemyRecordStore:
    """SQLAlchemy implementation of IRecordStore."""

    def __init__(
        self,
        session: AsyncSession,
        deposit_per_byte: int,
        max_record_size: int,
    ) -> None:
        self._session = session
        self._deposit_per_byte = deposit_per_byte
        self._max_record_size = max_record_size

    async def get(self, address: Address) -> RecordHandle | None:
        """Resolve a live record at an address."""
        model = await self._fetch(address.value)
        if model is None or model.is_closed:
            return None
        return self._to_handle(model)

    async def create(self, address: Address, size: int, payer: Address) -> RecordHandle:
        """Allocate a zeroed record, charging its deposit to the payer."""
        if await self._fetch(address.value) is not None:
            raise RecordAlreadyExistsError(str(address))
        if size > self._max_record_size:
            raise OutOfSpaceError(size, self._max_record_size)

        model = RecordModel(
            address=address.value,
            payer=payer.value,
            size=size,
            data=bytes(size),
            deposit=size * self._deposit_per_byte,
        )
        self._session.add(model)
        await self._session.flush()
        logger.debug("record_allocated", address=str(address), size=size)
        return self._to_handle(model)

    async def read(self, handle: RecordHandle) -> bytes:
        """Read the full record bytes."""
        model = await self._require_live(handle)
        return bytes(model.data)

    async def write(self, handle: RecordHandle, data: bytes) -> None:
        """Overwrite the record bytes, zero-padding to the allocated size."""
        model = await self._require_live(handle)
        if len(data) > model.size:
            raise OutOfSpaceError(len(data), model.size)
        model.data = data.ljust(model.size, b"\x00")
        await self._session.flush()

    async def close(self, handle: RecordHandle, refund_to: Address) -> int:
        """Tombstone the record and return its deposit."""
        model = await self._require_live(handle)
        refund = model.deposit
        model.is_closed = True
        model.data = b""
        model.deposit = 0
        model.refunded_to = refund_to.value
        model.closed_at = datetime.utcnow()
        await self._session.flush()
        logger.debug("record_closed", address=str(handle.address), refund=refund)
        return refund

    async def _fetch(self, address: bytes) -> RecordModel | None:
        # Row lock serializes concurrent operations on one address.
        stmt = select(RecordModel).where(RecordModel.address == address).with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _require_live(self, handle: RecordHandle) -> RecordModel:
        model = await self._fetch(handle.address.value)
        if model is None or model.is_closed:
            raise RecordNotFoundError(str(handle.address))
        return model

    def _to_handle(self, model: RecordModel) -> RecordHandle:
        return RecordHandle(
            address=Address(bytes(model.address)),
            size=model.size,
            deposit=model.deposit,
        )
