"""Unit tests for SQLAlchemyBackend."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userstore.infrastructure.persistence.backend import SQLAlchemyBackend, StorageBackend


def test_requires_exactly_one_source(db_session):
    with pytest.raises(ValueError):
        SQLAlchemyBackend()
    with pytest.raises(ValueError):
        SQLAlchemyBackend(
            session=db_session,
            session_factory=async_sessionmaker(db_session.bind, class_=AsyncSession),
        )


def test_satisfies_protocol(backend):
    assert isinstance(backend, StorageBackend)
    assert backend.dialect == "sqlite"


@pytest.mark.asyncio
async def test_execute_and_query(backend):
    await backend.execute("CREATE TABLE t (a TEXT, b INTEGER)", {})

    affected = await backend.execute(
        "INSERT INTO t (a, b) VALUES (:param_0, :param_1)", {"param_0": "x", "param_1": 7}
    )
    rows = await backend.query("SELECT a, b, NULL AS c FROM t", {})

    assert affected == 1
    assert rows == [{"a": "x", "b": "7", "c": ""}]


@pytest.mark.asyncio
async def test_session_factory_commits_each_call(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    backend = SQLAlchemyBackend(session_factory=factory)

    await backend.execute("CREATE TABLE t (a TEXT)", {})
    await backend.execute("INSERT INTO t (a) VALUES (:param_0)", {"param_0": "x"})

    assert backend.dialect == "sqlite"
    assert await backend.query("SELECT a FROM t", {}) == [{"a": "x"}]
