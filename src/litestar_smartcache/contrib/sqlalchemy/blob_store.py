"""SQLAlchemy-backed blob store for cached responses."""

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from litestar_smartcache.contrib.sqlalchemy.models import CachedBlobModel
from litestar_smartcache.exceptions import StorageError


class SQLAlchemyBlobStore:
    """Blob store backed by SQLAlchemy.

    Implements the BlobStore protocol.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._session_factory = session_factory

    async def put(self, key: str, value: bytes) -> None:
        """Insert or overwrite a blob."""
        try:
            async with self._session_factory() as session:
                await session.merge(CachedBlobModel(key=key, value=value))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError("put", exc) from exc

    async def get(self, key: str) -> bytes | None:
        """Get a blob by key."""
        try:
            async with self._session_factory() as session:
                blob = await session.get(CachedBlobModel, key)
                return None if blob is None else blob.value
        except SQLAlchemyError as exc:
            raise StorageError("get", exc) from exc

    async def list_keys(self, prefix: str = "") -> list[str]:
        """List blob keys starting with prefix."""
        try:
            async with self._session_factory() as session:
                stmt = select(CachedBlobModel.key).order_by(
                    CachedBlobModel.key.asc()
                )
                if prefix:
                    stmt = stmt.where(
                        CachedBlobModel.key.startswith(
                            prefix, autoescape=True
                        )
                    )
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError("list_keys", exc) from exc

    async def delete(self, key: str) -> None:
        """Delete a blob by key."""
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(CachedBlobModel).where(CachedBlobModel.key == key)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError("delete", exc) from exc
