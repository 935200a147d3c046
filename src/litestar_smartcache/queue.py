"""Durable queue helpers and the in-memory queue store."""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import datetime

import httpx

from litestar_smartcache.types import (
    OperationDraft,
    PendingOperation,
    utc_now,
)


async def snapshot_request(
    request: httpx.Request,
    now: datetime | None = None,
) -> OperationDraft:
    """Capture everything needed to resend a request later."""
    body = await request.aread()
    return OperationDraft(
        url=str(request.url),
        method=request.method.upper(),
        headers=dict(request.headers.items()),
        body=body,
        content_type=request.headers.get("content-type", ""),
        enqueued_at=now or utc_now(),
    )


class InMemoryOperationStore:
    """Pending operation store kept in process memory.

    Implements the PendingOperationStore protocol. IDs are never reused.
    """

    def __init__(self) -> None:
        self._items: dict[int, PendingOperation] = {}
        self._last_id = 0
        self._lock = asyncio.Lock()

    async def enqueue(self, draft: OperationDraft) -> int:
        async with self._lock:
            self._last_id += 1
            self._items[self._last_id] = PendingOperation(
                id=self._last_id,
                url=draft.url,
                method=draft.method,
                headers=dict(draft.headers),
                body=draft.body,
                content_type=draft.content_type,
                enqueued_at=draft.enqueued_at,
                retry_count=0,
            )
            return self._last_id

    async def list_all(self) -> list[PendingOperation]:
        async with self._lock:
            return [self._items[key] for key in sorted(self._items)]

    async def get(self, operation_id: int) -> PendingOperation | None:
        async with self._lock:
            return self._items.get(operation_id)

    async def update_retry_count(
        self, operation_id: int, retry_count: int
    ) -> None:
        async with self._lock:
            current = self._items.get(operation_id)
            if current is None or retry_count <= current.retry_count:
                return
            self._items[operation_id] = dataclasses.replace(
                current, retry_count=retry_count
            )

    async def remove(self, operation_id: int) -> None:
        async with self._lock:
            self._items.pop(operation_id, None)
