"""Composition root wiring settings, storage and the record authority."""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from core.config import settings
from core.logging import setup_logging
from domain.entities.address import Address
from domain.services.address_deriver import AddressDeriver
from domain.services.record_authority import RecordAuthority
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


async def init_models(engine: AsyncEngine) -> None:
    """Create the record tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_initialized")


def create_authority(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> RecordAuthority:
    """Create a RecordAuthority backed by the SQL record store."""
    if session_factory is None:
        from infrastructure.database.session import async_session_factory

        session_factory = async_session_factory

    def uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    deriver = AddressDeriver(Address.from_hex(settings.program_id))
    logger.info("record_authority_created", program_id=settings.program_id)
    return RecordAuthority(uow_factory, deriver)
