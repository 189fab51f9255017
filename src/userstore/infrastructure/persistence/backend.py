"""Storage backend contract and its SQLAlchemy implementation.

The user store depends only on two calls: execute a statement and get the
affected row count, and run a query and get rows back as string-keyed
mappings of string values.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Protocol, runtime_checkable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@runtime_checkable
class StorageBackend(Protocol):
    """What the user store needs from a database."""

    @property
    def dialect(self) -> str:
        """SQL dialect name, e.g. "sqlite" or "postgresql"."""
        ...

    async def execute(self, sql: str, params: dict[str, Any]) -> int:
        """Execute a statement and return the number of affected rows."""
        ...

    async def query(self, sql: str, params: dict[str, Any]) -> list[dict[str, str]]:
        """Run a query and return its rows."""
        ...


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class SQLAlchemyBackend:
    """StorageBackend over a SQLAlchemy async session.

    Given a session, statements run inside the caller's transaction and the
    caller commits. Given a session factory, every call runs in its own
    session and is committed immediately.
    """

    def __init__(
        self,
        session: AsyncSession | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            session: Session to run statements in (caller manages the transaction).
            session_factory: Factory for per-call, auto-committed sessions.

        Raises:
            ValueError: If neither or both of session and session_factory are given.
        """
        if (session is None) == (session_factory is None):
            raise ValueError("Provide exactly one of session or session_factory")
        self.session = session
        self.session_factory = session_factory

    @property
    def dialect(self) -> str:
        if self.session is not None:
            return self.session.get_bind().dialect.name
        return self.session_factory.kw["bind"].dialect.name

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[tuple[AsyncSession, bool], None]:
        if self.session is not None:
            yield self.session, False
            return
        async with self.session_factory() as session:
            yield session, True

    async def execute(self, sql: str, params: dict[str, Any]) -> int:
        async with self._session() as (session, owned):
            result = await session.execute(text(sql), params)
            if owned:
                await session.commit()
            return result.rowcount

    async def query(self, sql: str, params: dict[str, Any]) -> list[dict[str, str]]:
        async with self._session() as (session, _owned):
            result = await session.execute(text(sql), params)
            return [
                {key: _to_string(value) for key, value in row.items()}
                for row in result.mappings().all()
            ]
