"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

# Keep developer credentials out of the test process
os.environ["APP_ENV"] = "test"
os.environ["FIREBASE_API_KEY"] = ""
os.environ["GOOGLE_SERVICE_KEY"] = ""
os.environ["FIREBASE_CREDENTIALS_PATH"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.passwords import PasswordHasher
from infrastructure.database.connectivity import ConnectionMonitor
from infrastructure.database.record_store import RecordHistoryStore, RecordProfileStore
from infrastructure.database.session import create_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.memory.history_buffer import DegradedBuffer
from tests.fakes import FakeIdentityProvider, InMemoryProfileStore

# Test database URL (SQLite in memory, one shared connection)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return create_session_factory(engine)


@pytest.fixture
async def monitor(engine: AsyncEngine) -> ConnectionMonitor:
    """A monitor that has already connected and created the schema."""
    monitor = ConnectionMonitor(engine, retry_seconds=0.01)
    await monitor.connect_with_retry()
    return monitor


@pytest.fixture
def uow_factory(session_factory: async_sessionmaker[AsyncSession]):
    """Factory producing units of work on the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def record_profiles(uow_factory, monitor: ConnectionMonitor) -> RecordProfileStore:
    return RecordProfileStore(uow_factory, monitor)


@pytest.fixture
def record_history(uow_factory, monitor: ConnectionMonitor) -> RecordHistoryStore:
    return RecordHistoryStore(uow_factory, monitor)


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def document_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheap bcrypt cost so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def history_buffer() -> DegradedBuffer:
    return DegradedBuffer()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with no overrides."""
    from main import create_app

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
