"""Freshness cache for read operations."""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from litestar_smartcache.protocols import BlobStore
from litestar_smartcache.types import CachedResponse, CacheKey

logger = logging.getLogger(__name__)

_NAMESPACE_SEPARATOR = "|"


class InMemoryBlobStore:
    """Blob store kept in process memory.

    Implements the BlobStore protocol.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, value: bytes) -> None:
        async with self._lock:
            self._blobs[key] = value

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            return self._blobs.get(key)

    async def list_keys(self, prefix: str = "") -> list[str]:
        async with self._lock:
            return [key for key in self._blobs if key.startswith(prefix)]

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._blobs.pop(key, None)


class ResponseCache:
    """Stores the latest successful response per read operation.

    Entries are only ever overwritten, never evicted. All keys live in a
    namespace named after the cache, so bumping the cache name starts
    from an empty cache and ``purge_stale_namespaces`` can drop the old
    one.
    """

    def __init__(self, store: BlobStore, cache_name: str) -> None:
        self._store = store
        self.cache_name = cache_name
        self._prefix = f"{cache_name}{_NAMESPACE_SEPARATOR}"

    def _blob_key(self, key: CacheKey) -> str:
        return f"{self._prefix}{key.method} {key.url}"

    def _parse_blob_key(self, blob_key: str) -> CacheKey | None:
        method, sep, url = blob_key[len(self._prefix) :].partition(" ")
        if not sep or not method or not url:
            return None
        return CacheKey(method=method, url=url)

    async def put(self, key: CacheKey, response: CachedResponse) -> None:
        await self._store.put(
            self._blob_key(key), response.model_dump_json().encode()
        )

    async def get(self, key: CacheKey) -> CachedResponse | None:
        raw = await self._store.get(self._blob_key(key))
        if raw is None:
            return None
        try:
            return CachedResponse.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable cache entry for %s", key)
            return None

    async def list_keys(self) -> list[CacheKey]:
        keys = []
        for blob_key in await self._store.list_keys(self._prefix):
            key = self._parse_blob_key(blob_key)
            if key is None:
                logger.warning("Skipping malformed cache key %r", blob_key)
                continue
            keys.append(key)
        return keys

    async def purge_stale_namespaces(self) -> int:
        """Delete every blob outside this cache's namespace.

        Returns the number of deleted blobs.
        """
        deleted = 0
        for blob_key in await self._store.list_keys():
            if blob_key.startswith(self._prefix):
                continue
            await self._store.delete(blob_key)
            deleted += 1
        if deleted:
            logger.info(
                "Purged %d cache entries outside %r", deleted, self.cache_name
            )
        return deleted
