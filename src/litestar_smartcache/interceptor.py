"""Routes intercepted requests to the cache-first or queue path."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

import httpx

from litestar_smartcache.cache import ResponseCache
from litestar_smartcache.events import NotificationEvent, NotificationKind
from litestar_smartcache.exceptions import NetworkError
from litestar_smartcache.network import Network
from litestar_smartcache.notifications import NotificationDispatcher
from litestar_smartcache.protocols import PendingOperationStore
from litestar_smartcache.queue import snapshot_request
from litestar_smartcache.types import (
    CachedResponse,
    CacheKey,
    is_read_method,
    utc_now,
)

logger = logging.getLogger(__name__)

MARKER_HEADER = "x-smartcache"
MARKER_CACHE = "cache"
MARKER_OFFLINE = "offline"
MARKER_QUEUED = "queued"
MARKER_QUEUE_FAILED = "queue-failed"


def offline_unavailable_response(request: httpx.Request) -> httpx.Response:
    """Response for a read that failed with nothing cached."""
    return httpx.Response(
        503,
        headers={MARKER_HEADER: MARKER_OFFLINE},
        text="Offline and no cached data",
        request=request,
    )


def queued_response(
    request: httpx.Request, operation_id: int
) -> httpx.Response:
    """Response telling the caller the request will be replayed later."""
    return httpx.Response(
        202,
        headers={MARKER_HEADER: MARKER_QUEUED},
        json={
            "offline": True,
            "message": "Request saved for later sync",
            "operation_id": operation_id,
        },
        request=request,
    )


def queue_failed_response(request: httpx.Request) -> httpx.Response:
    """Response for a mutating request that could not be stored."""
    return httpx.Response(
        500,
        headers={MARKER_HEADER: MARKER_QUEUE_FAILED},
        json={"error": "Failed to save request offline"},
        request=request,
    )


class RequestInterceptor:
    """Classifies each outbound request purely by its method.

    ``GET`` and ``HEAD`` go cache-first: live responses refresh the
    cache, network failures fall back to it. Every other method goes
    straight to the network and is queued for replay when the network
    is unreachable. Callers always get a response back.
    """

    def __init__(
        self,
        *,
        queue: PendingOperationStore,
        cache: ResponseCache,
        dispatcher: NotificationDispatcher,
        network: Network,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._queue = queue
        self._cache = cache
        self._dispatcher = dispatcher
        self._network = network
        self._clock = clock
        self._background: set[asyncio.Task[None]] = set()

    async def handle(self, request: httpx.Request) -> httpx.Response:
        if is_read_method(request.method):
            return await self._handle_read(request)
        return await self._handle_mutation(request)

    async def _handle_read(self, request: httpx.Request) -> httpx.Response:
        key = CacheKey.for_request(request)
        try:
            response = await self._network.send(request)
        except NetworkError as exc:
            logger.info("Network unavailable for %s: %s", key, exc.cause)
            return await self._serve_from_cache(request, key)

        if response.is_success:
            self._store_in_background(key, CachedResponse.from_httpx(response))
            self._dispatcher.publish(
                NotificationEvent(
                    kind=NotificationKind.OPERATION_SYNCED,
                    url=key.url,
                    method=key.method,
                )
            )
        return response

    async def _serve_from_cache(
        self, request: httpx.Request, key: CacheKey
    ) -> httpx.Response:
        try:
            cached = await self._cache.get(key)
        except Exception:
            logger.exception("Cache lookup failed for %s", key)
            cached = None

        if cached is None:
            return offline_unavailable_response(request)

        self._dispatcher.publish(
            NotificationEvent(
                kind=NotificationKind.CACHE_SERVED,
                url=key.url,
                method=key.method,
            )
        )
        return cached.to_httpx(
            request, extra_headers={MARKER_HEADER: MARKER_CACHE}
        )

    async def _handle_mutation(
        self, request: httpx.Request
    ) -> httpx.Response:
        # Read the body up front so the snapshot still has it after the
        # network attempt consumed the stream.
        try:
            await request.aread()
        except Exception:
            logger.exception(
                "Failed to read body of %s %s", request.method, request.url
            )
            return queue_failed_response(request)

        try:
            return await self._network.send(request)
        except NetworkError as exc:
            logger.info(
                "Network unavailable for %s %s, queueing: %s",
                request.method,
                request.url,
                exc.cause,
            )

        try:
            draft = await snapshot_request(request, now=self._clock())
            operation_id = await self._queue.enqueue(draft)
        except Exception:
            logger.exception(
                "Failed to queue %s %s for later sync",
                request.method,
                request.url,
            )
            return queue_failed_response(request)

        self._dispatcher.publish(
            NotificationEvent(
                kind=NotificationKind.OPERATION_QUEUED,
                url=draft.url,
                method=draft.method,
            )
        )
        return queued_response(request, operation_id)

    def _store_in_background(
        self, key: CacheKey, response: CachedResponse
    ) -> None:
        task = asyncio.create_task(self._store(key, response))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _store(self, key: CacheKey, response: CachedResponse) -> None:
        try:
            await self._cache.put(key, response)
        except Exception:
            logger.exception("Failed to cache response for %s", key)

    async def wait_background(self) -> None:
        """Wait for pending cache writes to settle."""
        while self._background:
            await asyncio.gather(*self._background)
