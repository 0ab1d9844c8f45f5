"""Pytest configuration and fixtures."""

import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.address import Address
from domain.services.address_deriver import AddressDeriver
from main import init_models

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed program identity for reproducible addresses
TEST_PROGRAM_ID = Address(bytes(range(32)))


def make_identity() -> Address:
    """A random 32-byte caller identity."""
    return Address(uuid4().bytes + uuid4().bytes)


@pytest.fixture
def owner() -> Address:
    """The identity that owns the records under test."""
    return make_identity()


@pytest.fixture
def intruder() -> Address:
    """An identity distinct from ``owner``."""
    return make_identity()


@pytest.fixture
def deriver() -> AddressDeriver:
    """Address deriver bound to the test program identity."""
    return AddressDeriver(TEST_PROGRAM_ID)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine with the schema in place."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
