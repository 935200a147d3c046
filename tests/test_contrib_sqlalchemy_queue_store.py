"""Tests for the SQLAlchemy pending operation store."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from litestar_smartcache.config import SmartCacheConfig
from litestar_smartcache.contrib.sqlalchemy.queue_store import (
    SQLAlchemyOperationStore,
)
from litestar_smartcache.exceptions import StorageError
from litestar_smartcache.protocols import PendingOperationStore


@pytest.fixture
def store(async_session_factory):
    return SQLAlchemyOperationStore(async_session_factory)


def test_implements_protocol(store):
    assert isinstance(store, PendingOperationStore)


async def test_enqueue_and_get(store, make_draft):
    """Stored operation round-trips with retry count zero."""
    draft = make_draft(method="PUT", payload={"qty": 2})
    operation_id = await store.enqueue(draft)

    operation = await store.get(operation_id)

    assert operation.id == operation_id
    assert operation.method == "PUT"
    assert operation.url == draft.url
    assert operation.body == draft.body
    assert operation.headers == draft.headers
    assert operation.content_type == "application/json"
    assert operation.enqueued_at == draft.enqueued_at
    assert operation.retry_count == 0


async def test_get_missing_returns_none(store):
    assert await store.get(999) is None


async def test_list_all_in_insertion_order(store, make_draft):
    ids = [
        await store.enqueue(make_draft(url=f"https://api.test/{name}"))
        for name in ("a", "b", "c")
    ]

    operations = await store.list_all()

    assert [op.id for op in operations] == ids
    assert ids == sorted(ids)


async def test_ids_not_reused_after_remove(store, make_draft):
    first = await store.enqueue(make_draft())
    await store.remove(first)

    second = await store.enqueue(make_draft())

    assert second > first


async def test_update_retry_count_only_increases(store, make_draft):
    operation_id = await store.enqueue(make_draft())

    await store.update_retry_count(operation_id, 2)
    await store.update_retry_count(operation_id, 1)

    assert (await store.get(operation_id)).retry_count == 2


async def test_update_unknown_id_is_ignored(store):
    await store.update_retry_count(42, 1)


async def test_remove_is_idempotent(store, make_draft):
    operation_id = await store.enqueue(make_draft())

    await store.remove(operation_id)
    await store.remove(operation_id)

    assert await store.list_all() == []


async def test_store_names_are_isolated(async_session_factory, make_draft):
    requests = SQLAlchemyOperationStore(async_session_factory, "requests")
    uploads = SQLAlchemyOperationStore(async_session_factory, "uploads")
    operation_id = await requests.enqueue(make_draft())

    assert await uploads.list_all() == []
    assert await uploads.get(operation_id) is None
    await uploads.remove(operation_id)
    assert len(await requests.list_all()) == 1


async def test_enqueued_at_is_timezone_aware(store, make_draft, clock):
    draft = make_draft(enqueued_at=clock.now - timedelta(days=1))
    operation_id = await store.enqueue(draft)

    operation = await store.get(operation_id)

    assert operation.enqueued_at.tzinfo is not None
    assert operation.age(clock.now) == timedelta(days=1)


async def test_database_errors_become_storage_errors():
    session_factory = MagicMock(
        side_effect=OperationalError("SELECT", {}, Exception("db is gone"))
    )
    store = SQLAlchemyOperationStore(session_factory)

    with pytest.raises(StorageError) as exc_info:
        await store.list_all()

    assert exc_info.value.operation == "list_all"
    assert isinstance(exc_info.value.cause, OperationalError)


async def test_from_config_uses_queue_namespace(async_session_factory):
    config = SmartCacheConfig(queue_db_version=3)

    store = SQLAlchemyOperationStore.from_config(async_session_factory, config)

    assert store.store_name == "smart-cache-db/offline-requests@v3"


async def test_queue_versions_do_not_share_rows(
    async_session_factory, make_draft
):
    """Bumping the queue version starts from an empty queue."""
    v1 = SQLAlchemyOperationStore.from_config(
        async_session_factory, SmartCacheConfig(queue_db_version=1)
    )
    v2 = SQLAlchemyOperationStore.from_config(
        async_session_factory, SmartCacheConfig(queue_db_version=2)
    )
    old_id = await v1.enqueue(make_draft(url="https://api.test/old"))
    new_id = await v2.enqueue(make_draft(url="https://api.test/new"))

    assert [op.id for op in await v1.list_all()] == [old_id]
    assert [op.id for op in await v2.list_all()] == [new_id]
    assert await v2.get(old_id) is None
