"""SQLAlchemy-backed pending operation store."""

from __future__ import annotations

from datetime import UTC

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from litestar_smartcache.config import SmartCacheConfig
from litestar_smartcache.contrib.sqlalchemy.models import (
    PendingOperationModel,
)
from litestar_smartcache.exceptions import StorageError
from litestar_smartcache.types import OperationDraft, PendingOperation


def _to_operation(row: PendingOperationModel) -> PendingOperation:
    enqueued_at = row.enqueued_at
    # SQLite drops tzinfo on the way back.
    if enqueued_at.tzinfo is None:
        enqueued_at = enqueued_at.replace(tzinfo=UTC)
    return PendingOperation(
        id=row.id,
        url=row.url,
        method=row.method,
        headers=dict(row.headers or {}),
        body=row.body or b"",
        content_type=row.content_type,
        enqueued_at=enqueued_at,
        retry_count=row.retry_count,
    )


class SQLAlchemyOperationStore:
    """Pending operation store backed by SQLAlchemy.

    Implements the PendingOperationStore protocol. Every method runs in
    its own session and commits once, so each call is atomic. Rows are
    scoped by ``store_name`` so several queues can share one table.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        store_name: str = "offline-requests",
    ) -> None:
        self._session_factory = session_factory
        self._store_name = store_name

    @classmethod
    def from_config(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        config: SmartCacheConfig,
    ) -> SQLAlchemyOperationStore:
        """Scope the store to ``config.queue_namespace``.

        Configs differing in database name, store name or version get
        disjoint queues.
        """
        return cls(session_factory, store_name=config.queue_namespace)

    @property
    def store_name(self) -> str:
        return self._store_name

    def _in_store(self):
        return PendingOperationModel.store_name == self._store_name

    async def enqueue(self, draft: OperationDraft) -> int:
        """Store a new pending operation and return its ID."""
        try:
            async with self._session_factory() as session:
                row = PendingOperationModel(
                    store_name=self._store_name,
                    url=draft.url,
                    method=draft.method,
                    headers=dict(draft.headers),
                    body=draft.body,
                    content_type=draft.content_type,
                    enqueued_at=draft.enqueued_at,
                    retry_count=0,
                )
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return row.id
        except SQLAlchemyError as exc:
            raise StorageError("enqueue", exc) from exc

    async def list_all(self) -> list[PendingOperation]:
        """Get every pending operation in insertion order."""
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(PendingOperationModel)
                    .where(self._in_store())
                    .order_by(PendingOperationModel.id.asc())
                )
                result = await session.execute(stmt)
                return [_to_operation(row) for row in result.scalars()]
        except SQLAlchemyError as exc:
            raise StorageError("list_all", exc) from exc

    async def get(self, operation_id: int) -> PendingOperation | None:
        """Get one pending operation by ID."""
        try:
            async with self._session_factory() as session:
                row = await session.get(PendingOperationModel, operation_id)
                if row is None or row.store_name != self._store_name:
                    return None
                return _to_operation(row)
        except SQLAlchemyError as exc:
            raise StorageError("get", exc) from exc

    async def update_retry_count(
        self, operation_id: int, retry_count: int
    ) -> None:
        """Raise the retry count; never lowers it."""
        try:
            async with self._session_factory() as session:
                stmt = (
                    update(PendingOperationModel)
                    .where(PendingOperationModel.id == operation_id)
                    .where(self._in_store())
                    .where(PendingOperationModel.retry_count < retry_count)
                    .values(retry_count=retry_count)
                )
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError("update_retry_count", exc) from exc

    async def remove(self, operation_id: int) -> None:
        """Delete a pending operation."""
        try:
            async with self._session_factory() as session:
                stmt = (
                    delete(PendingOperationModel)
                    .where(PendingOperationModel.id == operation_id)
                    .where(self._in_store())
                )
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError("remove", exc) from exc
