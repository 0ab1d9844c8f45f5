"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import settings
from infrastructure.database.repositories.sqlalchemy_record_store import SQLAlchemyRecordStore


class SQLAlchemyUnitOfWork:
    """Unit of Work implementation using SQLAlchemy."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        deposit_per_byte: Optional[int] = None,
        max_record_size: Optional[int] = None,
    ) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._deposit_per_byte = (
            settings.deposit_per_byte if deposit_per_byte is None else deposit_per_byte
        )
        self._max_record_size = (
            settings.max_record_size if max_record_size is None else max_record_size
        )

    @property
    def records(self) -> SQLAlchemyRecordStore:
        """Get record store."""
        if not self._session:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return SQLAlchemyRecordStore(
            self._session,
            deposit_per_byte=self._deposit_per_byte,
            max_record_size=self._max_record_size,
        )

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter the context manager and create session."""
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[Exception],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager and cleanup."""
        if self._session:
            if exc_type:
                await self.rollback()
            await self._session.close()
            self._session = None
