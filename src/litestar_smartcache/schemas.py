"""Request/response schemas for HTTP endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from litestar_smartcache.events import NotificationEvent
from litestar_smartcache.orchestrator import SyncReport
from litestar_smartcache.types import PendingOperation


class PendingOperationResponse(BaseModel):
    """Serialized queue entry. The body is summarized, not returned."""

    id: int
    method: str
    url: str
    content_type: str
    body_size: int
    enqueued_at: datetime
    retry_count: int

    @classmethod
    def from_operation(cls, operation: PendingOperation):
        return cls(
            id=operation.id,
            method=operation.method,
            url=operation.url,
            content_type=operation.content_type,
            body_size=len(operation.body),
            enqueued_at=operation.enqueued_at,
            retry_count=operation.retry_count,
        )


class SyncReportResponse(BaseModel):
    """Outcome of one sync pass."""

    reason: str
    started_at: datetime
    finished_at: datetime | None
    synced: int
    failed: int
    expired: int
    exhausted: int
    refreshed: int
    stale: int

    @classmethod
    def from_report(cls, report: SyncReport):
        return cls(
            reason=str(report.reason),
            started_at=report.started_at,
            finished_at=report.finished_at,
            synced=report.synced,
            failed=report.failed,
            expired=report.expired,
            exhausted=report.exhausted,
            refreshed=report.refreshed,
            stale=report.stale,
        )


class SyncStatusResponse(BaseModel):
    """Current orchestrator state and the last finished pass."""

    state: str
    pending: int
    last_report: SyncReportResponse | None = None


class ControlMessageRequest(BaseModel):
    """Control channel message, e.g. ``{"type": "SYNC_OFFLINE_REQUESTS"}``."""

    type: str
    payload: dict[str, Any] | None = None


class ControlMessageResponse(BaseModel):
    accepted: bool


class NotificationResponse(BaseModel):
    """Displayed notification in the ``{kind, url, method}`` shape."""

    kind: str
    url: str
    method: str | None = None
    message: str
    level: str

    @classmethod
    def from_event(cls, event: NotificationEvent):
        message, level = event.describe()
        return cls(
            **event.to_message(),
            message=message,
            level=str(level),
        )
