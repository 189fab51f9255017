"""Integration tests for the user store against in-memory SQLite."""

from datetime import datetime, timedelta, timezone

import pytest

from userstore.core.clock import MAX_DATETIME, format_datetime
from userstore.core.config import StoreOptions
from userstore.core.exceptions import InvalidArgumentError
from userstore.domain.entities.user import (
    USER_STATUS_ACTIVE,
    USER_STATUS_INACTIVE,
    USER_STATUS_UNVERIFIED,
    User,
)
from userstore.domain.entities.user_query import UserQuery
from userstore.infrastructure.persistence.repositories import UserRepository

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def seed(store: UserRepository, *statuses: str) -> list[User]:
    users = []
    for index, status in enumerate(statuses):
        user = User.new().set_email(f"user{index}@acme.io").set_status(status)
        await store.create(user)
        users.append(user)
    return users


async def test_create_and_read_back(store):
    user = User.new().set_email("ann@acme.io").set_first_name("Ann").set_memo("vip")

    await store.create(user)
    loaded = await store.find_by_id(user.id)

    assert loaded.data() == user.data()
    assert loaded.soft_deleted_at == MAX_DATETIME
    assert loaded.is_dirty() is False


async def test_count_by_status(store):
    await seed(
        store,
        USER_STATUS_ACTIVE,
        USER_STATUS_ACTIVE,
        USER_STATUS_INACTIVE,
        USER_STATUS_ACTIVE,
        USER_STATUS_UNVERIFIED,
    )

    assert await store.count(UserQuery().set_status(USER_STATUS_ACTIVE)) == 3
    assert await store.count() == 5
    assert await store.count(
        UserQuery().set_status_in([USER_STATUS_INACTIVE, USER_STATUS_UNVERIFIED])
    ) == 2


async def test_list_with_ordering_and_pagination(store):
    users = await seed(store, *[USER_STATUS_ACTIVE] * 5)

    page = await store.list_users(
        UserQuery().set_order_by("email").set_sort_order("asc").set_limit(2).set_offset(1)
    )

    assert [u.email for u in page] == [users[1].email, users[2].email]


async def test_list_offset_without_limit(store):
    await seed(store, *[USER_STATUS_ACTIVE] * 3)

    rest = await store.list_users(UserQuery().set_order_by("email").set_offset(1))

    assert len(rest) == 2


async def test_list_by_created_at_range(store):
    await seed(store, USER_STATUS_ACTIVE, USER_STATUS_ACTIVE)
    now = datetime.now(timezone.utc)

    within = await store.list_users(
        UserQuery()
        .set_created_at_gte(now - timedelta(minutes=1))
        .set_created_at_lte(now + timedelta(minutes=1))
    )
    before = await store.list_users(UserQuery().set_created_at_lte(now - timedelta(days=1)))

    assert len(within) == 2
    assert before == []


async def test_find_by_email_or_create(store):
    created = await store.find_by_email_or_create("ann@acme.io", USER_STATUS_UNVERIFIED)
    found = await store.find_by_email_or_create("ann@acme.io", USER_STATUS_ACTIVE)

    assert found.id == created.id
    assert found.status == USER_STATUS_UNVERIFIED
    assert await store.count() == 1


async def test_find_missing_returns_none(store):
    assert await store.find_by_id("missing") is None
    assert await store.find_by_email("nobody@acme.io") is None


async def test_empty_id_rejected(store):
    with pytest.raises(InvalidArgumentError):
        await store.find_by_id("")


async def test_update_persists_changed_columns(store):
    user = User.new().set_email("ann@acme.io")
    await store.create(user)

    user.set_first_name("Ann").set_status(USER_STATUS_ACTIVE)
    await store.update(user)

    loaded = await store.find_by_id(user.id)
    assert loaded.first_name == "Ann"
    assert loaded.status == USER_STATUS_ACTIVE
    assert loaded.updated_at >= loaded.created_at


async def test_soft_deleted_users_are_hidden(store):
    keep, gone = await seed(store, USER_STATUS_ACTIVE, USER_STATUS_ACTIVE)

    assert await store.soft_delete_by_id(gone.id) is True

    assert await store.find_by_id(gone.id) is None
    assert await store.count() == 1
    assert await store.count(UserQuery().set_with_soft_deleted(True)) == 2

    visible = await store.list_users()
    assert [u.id for u in visible] == [keep.id]


async def test_future_soft_delete_stays_visible(store):
    user = User.new().set_email("later@acme.io")
    user.set_soft_deleted_at(format_datetime(datetime.now(timezone.utc) + timedelta(days=1)))
    await store.create(user)

    assert await store.find_by_id(user.id) is not None


async def test_soft_delete_missing_user(store):
    assert await store.soft_delete_by_id("missing") is False


async def test_hard_delete(store):
    first, second = await seed(store, USER_STATUS_ACTIVE, USER_STATUS_ACTIVE)

    await store.delete(first)
    await store.delete_by_id(second.id)

    assert await store.count(UserQuery().set_with_soft_deleted(True)) == 0


async def test_auto_migrate_is_idempotent(backend):
    options = StoreOptions(user_table_name="members", automigrate_enabled=True)

    first = await UserRepository.open(backend, options)
    await first.create(User.new().set_email("a@acme.io"))
    second = await UserRepository.open(backend, options)

    assert await second.count() == 1


async def test_stores_are_independent(backend):
    members = await UserRepository.open(
        backend, StoreOptions(user_table_name="members", automigrate_enabled=True)
    )
    admins = await UserRepository.open(
        backend, StoreOptions(user_table_name="admins", automigrate_enabled=True)
    )

    await members.create(User.new().set_email("a@acme.io"))

    assert await members.count() == 1
    assert await admins.count() == 0
