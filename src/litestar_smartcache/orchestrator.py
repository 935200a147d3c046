"""Replays queued operations and refreshes cached reads."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

import httpx

from litestar_smartcache.cache import ResponseCache
from litestar_smartcache.events import (
    NotificationEvent,
    NotificationKind,
    SyncTrigger,
    parse_control_message,
)
from litestar_smartcache.exceptions import NetworkError, StorageError
from litestar_smartcache.network import Network
from litestar_smartcache.notifications import NotificationDispatcher
from litestar_smartcache.protocols import PendingOperationStore
from litestar_smartcache.types import (
    CachedResponse,
    CacheKey,
    PendingOperation,
    is_read_method,
    utc_now,
)

logger = logging.getLogger(__name__)


class SyncState(StrEnum):
    IDLE = "idle"
    REPLAYING_QUEUE = "replaying_queue"
    REFRESHING_CACHE = "refreshing_cache"


@dataclass
class SyncReport:
    """Outcome counters for one sync pass."""

    reason: SyncTrigger
    started_at: datetime
    finished_at: datetime | None = None
    synced: int = 0
    failed: int = 0
    expired: int = 0
    exhausted: int = 0
    refreshed: int = 0
    stale: int = 0
    errors: list[str] = field(default_factory=list)


class SyncOrchestrator:
    """Runs sync passes, at most one at a time.

    A pass first replays the pending queue strictly in insertion order,
    then refreshes every cached read concurrently. Mutations go first so
    refreshed reads observe them. Triggers arriving while a pass is
    active are dropped: the running pass already covers the durable
    state they would have looked at.
    """

    def __init__(
        self,
        *,
        queue: PendingOperationStore,
        cache: ResponseCache,
        dispatcher: NotificationDispatcher,
        network: Network,
        max_retries: int = 5,
        max_age: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._queue = queue
        self._cache = cache
        self._dispatcher = dispatcher
        self._network = network
        self.max_retries = max_retries
        self.max_age = max_age
        self._clock = clock
        self._gate = asyncio.Lock()
        self._state = SyncState.IDLE
        self._background: set[asyncio.Task[Any]] = set()
        self._scheduled: asyncio.Task[Any] | None = None
        self.last_report: SyncReport | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._gate.locked()

    async def trigger(
        self, reason: SyncTrigger = SyncTrigger.MANUAL
    ) -> SyncReport | None:
        """Run one pass, or return None if a pass is already active."""
        if self._gate.locked():
            logger.debug("Sync pass already running, ignoring %s", reason)
            return None
        async with self._gate:
            report = SyncReport(reason=reason, started_at=self._clock())
            logger.info("Sync pass started (%s)", reason)
            try:
                self._state = SyncState.REPLAYING_QUEUE
                await self._replay_queue(report)
                self._state = SyncState.REFRESHING_CACHE
                await self._refresh_cache(report)
            finally:
                self._state = SyncState.IDLE
                report.finished_at = self._clock()
                self.last_report = report
            logger.info(
                "Sync pass finished: %d synced, %d failed, %d expired, "
                "%d exhausted, %d refreshed, %d stale",
                report.synced,
                report.failed,
                report.expired,
                report.exhausted,
                report.refreshed,
                report.stale,
            )
            return report

    def trigger_in_background(
        self, reason: SyncTrigger = SyncTrigger.MANUAL
    ) -> bool:
        """Schedule a pass.

        Returns False if a pass is already active or scheduled.
        """
        if self._gate.locked() or self._scheduled is not None:
            logger.debug("Sync pass already running, ignoring %s", reason)
            return False
        task = asyncio.create_task(self.trigger(reason))
        self._scheduled = task
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        task.add_done_callback(self._clear_scheduled)
        return True

    def _clear_scheduled(self, task: asyncio.Task[Any]) -> None:
        if self._scheduled is task:
            self._scheduled = None

    def handle_message(self, message: Any) -> bool:
        """Entry point for the control channel.

        Returns True when the message started a pass.
        """
        reason = parse_control_message(message)
        if reason is None:
            return False
        return self.trigger_in_background(reason)

    async def wait_background(self) -> None:
        while self._background:
            await asyncio.gather(*self._background)

    async def _replay_queue(self, report: SyncReport) -> None:
        try:
            operations = await self._queue.list_all()
        except StorageError as exc:
            logger.error("Cannot read pending operations: %s", exc)
            report.errors.append(str(exc))
            return

        for operation in operations:
            try:
                await self._replay_one(operation, report)
            except StorageError as exc:
                logger.error(
                    "Storage failure while replaying operation %s: %s",
                    operation.id,
                    exc,
                )
                report.errors.append(str(exc))

    async def _replay_one(
        self, operation: PendingOperation, report: SyncReport
    ) -> None:
        if operation.age(self._clock()) > self.max_age:
            await self._queue.remove(operation.id)
            report.expired += 1
            logger.info(
                "Dropped operation %s (%s %s): older than %s",
                operation.id,
                operation.method,
                operation.url,
                self.max_age,
            )
            return

        if operation.retry_count >= self.max_retries:
            await self._queue.remove(operation.id)
            report.exhausted += 1
            logger.warning(
                "Dropped operation %s (%s %s): exhausted after %d attempts",
                operation.id,
                operation.method,
                operation.url,
                operation.retry_count,
            )
            return

        detail: str
        try:
            response = await self._network.send(
                self._build_replay_request(operation)
            )
        except NetworkError as exc:
            detail = str(exc.cause or exc)
        else:
            if response.is_success:
                await self._queue.remove(operation.id)
                report.synced += 1
                self._dispatcher.publish(
                    NotificationEvent(
                        kind=NotificationKind.OPERATION_SYNCED,
                        url=operation.url,
                        method=operation.method,
                    )
                )
                return
            detail = f"status {response.status_code}"

        await self._queue.update_retry_count(
            operation.id, operation.retry_count + 1
        )
        report.failed += 1
        logger.info(
            "Operation %s (%s %s): attempt %d failed: %s",
            operation.id,
            operation.method,
            operation.url,
            operation.retry_count + 1,
            detail,
        )
        self._dispatcher.publish(
            NotificationEvent(
                kind=NotificationKind.SYNC_FAILED,
                url=operation.url,
                method=operation.method,
                detail=detail,
            )
        )

    def _build_replay_request(
        self, operation: PendingOperation
    ) -> httpx.Request:
        # Length is recomputed from the stored body.
        headers = {
            name: value
            for name, value in operation.headers.items()
            if name.lower() != "content-length"
        }
        if operation.content_type:
            headers["content-type"] = operation.content_type
        content = None
        if not is_read_method(operation.method):
            content = operation.body
        return self._network.build_request(
            operation.method,
            operation.url,
            headers=headers,
            content=content,
        )

    async def _refresh_cache(self, report: SyncReport) -> None:
        try:
            keys = await self._cache.list_keys()
        except StorageError as exc:
            logger.error("Cannot list cached responses: %s", exc)
            report.errors.append(str(exc))
            return

        results = await asyncio.gather(
            *(self._refresh_one(key, report) for key in keys),
            return_exceptions=True,
        )
        for key, result in zip(keys, results, strict=True):
            if isinstance(result, Exception):
                logger.error("Refreshing %s failed: %s", key, result)
                report.errors.append(str(result))

    async def _refresh_one(self, key: CacheKey, report: SyncReport) -> None:
        try:
            response = await self._network.send(
                self._network.build_request(key.method, key.url)
            )
        except NetworkError as exc:
            logger.info("Could not refresh %s: %s", key, exc.cause)
            response = None

        if response is not None and response.is_success:
            await self._cache.put(key, CachedResponse.from_httpx(response))
            report.refreshed += 1
            self._dispatcher.publish(
                NotificationEvent(
                    kind=NotificationKind.OPERATION_SYNCED,
                    url=key.url,
                    method=key.method,
                )
            )
            return

        if await self._cache.get(key) is not None:
            report.stale += 1
            self._dispatcher.publish(
                NotificationEvent(
                    kind=NotificationKind.CACHE_SERVED,
                    url=key.url,
                    method=key.method,
                )
            )
