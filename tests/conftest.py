"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from userstore.core.config import StoreOptions
from userstore.infrastructure.persistence.backend import SQLAlchemyBackend
from userstore.infrastructure.persistence.repositories import UserRepository

TOKENIZED_COLUMNS = ("first_name", "last_name", "email")


class InMemoryTokenVault:
    """Token vault double that keeps tokens in a dict and records every call."""

    def __init__(self, prefix: str = "tk_") -> None:
        self.prefix = prefix
        self.values: dict[str, str] = {}
        self.calls: list[tuple[dict[str, str], dict[str, str], list[str]]] = []
        self._counter = 0

    async def reconcile(
        self,
        creates: dict[str, str],
        updates: dict[str, str],
        deletes: list[str],
    ) -> dict[str, str]:
        self.calls.append((dict(creates), dict(updates), list(deletes)))

        created = {}
        for column, value in creates.items():
            self._counter += 1
            token = f"{self.prefix}{self._counter:06d}"
            self.values[token] = value
            created[column] = token

        for token, value in updates.items():
            self.values[token] = value

        for token in deletes:
            self.values.pop(token, None)

        return created

    async def read(self, tokens: list[str]) -> dict[str, str]:
        return {token: self.values[token] for token in tokens if token in self.values}


@pytest.fixture
def vault() -> InMemoryTokenVault:
    """An empty in-memory token vault."""
    return InMemoryTokenVault()


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared across connections."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def backend(db_session: AsyncSession) -> SQLAlchemyBackend:
    """Storage backend running in the test session."""
    return SQLAlchemyBackend(session=db_session)


@pytest_asyncio.fixture
async def store(backend: SQLAlchemyBackend) -> UserRepository:
    """User store with no tokenized columns and a provisioned table."""
    return await UserRepository.open(backend, StoreOptions(automigrate_enabled=True))


@pytest_asyncio.fixture
async def tokenized_store(
    backend: SQLAlchemyBackend, vault: InMemoryTokenVault
) -> UserRepository:
    """User store with names and email tokenized through the in-memory vault."""
    options = StoreOptions(
        user_table_name="tokenized_users",
        tokenized_columns=TOKENIZED_COLUMNS,
        automigrate_enabled=True,
    )
    return await UserRepository.open(backend, options, vault)
