"""Composition root wiring the queue, cache, dispatcher and sync engine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import httpx

from litestar_smartcache.cache import InMemoryBlobStore, ResponseCache
from litestar_smartcache.config import SmartCacheConfig
from litestar_smartcache.interceptor import RequestInterceptor
from litestar_smartcache.network import Network
from litestar_smartcache.notifications import (
    LoggingObserver,
    NotificationDispatcher,
    NotificationFeed,
)
from litestar_smartcache.orchestrator import SyncOrchestrator
from litestar_smartcache.protocols import BlobStore, PendingOperationStore
from litestar_smartcache.queue import InMemoryOperationStore
from litestar_smartcache.transport import OfflineTransport
from litestar_smartcache.types import utc_now

logger = logging.getLogger(__name__)


class SmartCache:
    """Owns one instance of every smart cache component.

    Construct once at startup. Stores default to in-process memory;
    pass the SQLAlchemy-backed ones from
    ``litestar_smartcache.contrib.sqlalchemy`` for durability.
    """

    def __init__(
        self,
        config: SmartCacheConfig | None = None,
        *,
        queue: PendingOperationStore | None = None,
        blob_store: BlobStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config or SmartCacheConfig()
        self.queue = queue or InMemoryOperationStore()
        self.cache = ResponseCache(
            blob_store or InMemoryBlobStore(),
            cache_name=self.config.cache_name,
        )
        self.feed = NotificationFeed(maxlen=self.config.notification_feed_size)
        self.dispatcher = NotificationDispatcher(
            enabled=self.config.show_notifications,
            display_seconds=self.config.notification_display_seconds,
            observers=[LoggingObserver(), self.feed],
        )
        self.network = Network(
            transport,
            timeout_seconds=self.config.request_timeout_seconds,
        )
        self.interceptor = RequestInterceptor(
            queue=self.queue,
            cache=self.cache,
            dispatcher=self.dispatcher,
            network=self.network,
            clock=clock,
        )
        self.orchestrator = SyncOrchestrator(
            queue=self.queue,
            cache=self.cache,
            dispatcher=self.dispatcher,
            network=self.network,
            max_retries=self.config.max_retries,
            max_age=self.config.max_age,
            clock=clock,
        )

    def transport(self) -> OfflineTransport:
        """Interception hook to mount on an httpx client."""
        return OfflineTransport(self.interceptor)

    def client(self, **kwargs: Any) -> httpx.AsyncClient:
        """Create an ``httpx.AsyncClient`` routed through the smart cache."""
        kwargs.setdefault("timeout", self.config.request_timeout_seconds)
        return httpx.AsyncClient(transport=self.transport(), **kwargs)

    async def startup(self) -> None:
        """Drop cache entries left behind by other cache names."""
        await self.cache.purge_stale_namespaces()
        logger.info(
            "Smart cache ready (cache %r, queue %r)",
            self.config.cache_name,
            self.config.queue_namespace,
        )

    async def aclose(self) -> None:
        await self.orchestrator.wait_background()
        await self.interceptor.wait_background()
        await self.dispatcher.aclose()
        await self.network.aclose()
