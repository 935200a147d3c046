"""Value types shared by the queue, the cache and the sync engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import httpx
from pydantic import BaseModel, ConfigDict, Field

READ_METHODS = frozenset({"GET", "HEAD"})

# Stored content is already decoded, so encoding/framing headers from the
# original response no longer describe it.
_UNCACHEABLE_HEADERS = frozenset(
    {"content-encoding", "content-length", "transfer-encoding"}
)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def is_read_method(method: str) -> bool:
    """Return True for methods served cache-first."""
    return method.upper() in READ_METHODS


@dataclass(frozen=True)
class OperationDraft:
    """Snapshot of a mutating request before the queue assigns an ID."""

    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    content_type: str = ""
    enqueued_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class PendingOperation:
    """A queued mutating request awaiting replay.

    Only ``retry_count`` ever changes over an entry's lifetime, and only
    through the store; instances themselves are immutable snapshots.
    """

    id: int
    url: str
    method: str
    headers: dict[str, str]
    body: bytes
    content_type: str
    enqueued_at: datetime
    retry_count: int = 0

    def age(self, now: datetime) -> timedelta:
        return now - self.enqueued_at


@dataclass(frozen=True)
class CacheKey:
    """Identity of a cached read operation."""

    method: str
    url: str

    @classmethod
    def for_request(cls, request: httpx.Request) -> CacheKey:
        return cls(method=request.method.upper(), url=str(request.url))

    def __str__(self) -> str:
        return f"{self.method} {self.url}"


class CachedResponse(BaseModel):
    """Last successful response observed for a read operation."""

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    status_code: int
    reason_phrase: str = ""
    headers: list[tuple[str, str]] = Field(default_factory=list)
    content: bytes = b""
    stored_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> CachedResponse:
        """Capture a response whose body has already been read."""
        return cls(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=[
                (name, value)
                for name, value in response.headers.items()
                if name.lower() not in _UNCACHEABLE_HEADERS
            ],
            content=response.content,
        )

    def to_httpx(
        self,
        request: httpx.Request,
        extra_headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        headers = httpx.Headers(self.headers)
        for name, value in (extra_headers or {}).items():
            headers[name] = value
        return httpx.Response(
            status_code=self.status_code,
            headers=headers,
            content=self.content,
            request=request,
            extensions={"reason_phrase": self.reason_phrase.encode()},
        )
