"""Shared fixtures for litestar-smartcache tests."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from litestar import Litestar

from litestar_smartcache.cache import InMemoryBlobStore, ResponseCache
from litestar_smartcache.config import SmartCacheConfig
from litestar_smartcache.engine import SmartCache
from litestar_smartcache.events import NotificationEvent, NotificationKind
from litestar_smartcache.interceptor import RequestInterceptor
from litestar_smartcache.network import Network
from litestar_smartcache.notifications import NotificationDispatcher
from litestar_smartcache.orchestrator import SyncOrchestrator
from litestar_smartcache.plugin import create_smartcache_router
from litestar_smartcache.queue import InMemoryOperationStore
from litestar_smartcache.types import OperationDraft

START = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class Upstream:
    """Scriptable server behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.online = True
        self.offline_urls: set[str] = set()
        self.statuses: dict[str, int] = {}
        self.calls: list[httpx.Request] = []
        self.version = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        url = str(request.url)
        if not self.online or url in self.offline_urls:
            raise httpx.ConnectError("network is down", request=request)
        self.version += 1
        return httpx.Response(
            self.statuses.get(url, 200),
            json={
                "method": request.method,
                "url": url,
                "version": self.version,
            },
        )

    def called(self) -> list[tuple[str, str]]:
        return [(r.method, str(r.url)) for r in self.calls]


class RecordingObserver:
    """Records show/hide calls and whether displays ever overlapped."""

    def __init__(self) -> None:
        self.log: list[tuple[str, NotificationEvent]] = []
        self.showing = 0
        self.max_showing = 0

    async def show(self, event: NotificationEvent) -> None:
        self.showing += 1
        self.max_showing = max(self.max_showing, self.showing)
        self.log.append(("show", event))

    async def hide(self, event: NotificationEvent) -> None:
        self.showing -= 1
        self.log.append(("hide", event))

    @property
    def shown(self) -> list[NotificationEvent]:
        return [event for action, event in self.log if action == "show"]

    def kinds(self) -> list[NotificationKind]:
        return [event.kind for event in self.shown]


def _make_draft(
    url: str = "https://api.test/orders",
    method: str = "POST",
    *,
    payload: dict | None = None,
    enqueued_at: datetime = START,
) -> OperationDraft:
    return OperationDraft(
        url=url,
        method=method,
        headers={"content-type": "application/json", "x-client": "tests"},
        body=json.dumps(payload or {"item": "widget"}).encode(),
        content_type="application/json",
        enqueued_at=enqueued_at,
    )


@pytest.fixture()
def make_draft():
    return _make_draft


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture()
def mock_transport(upstream: Upstream) -> httpx.MockTransport:
    return httpx.MockTransport(upstream.handler)


@pytest.fixture()
def network(mock_transport: httpx.MockTransport) -> Network:
    return Network(mock_transport, timeout_seconds=1.0)


@pytest.fixture()
def queue() -> InMemoryOperationStore:
    return InMemoryOperationStore()


@pytest.fixture()
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def cache(blob_store: InMemoryBlobStore) -> ResponseCache:
    return ResponseCache(blob_store, cache_name="test-cache")


@pytest.fixture()
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture()
def dispatcher(observer: RecordingObserver) -> NotificationDispatcher:
    return NotificationDispatcher(display_seconds=0, observers=[observer])


@pytest.fixture()
def interceptor(
    queue: InMemoryOperationStore,
    cache: ResponseCache,
    dispatcher: NotificationDispatcher,
    network: Network,
    clock: FakeClock,
) -> RequestInterceptor:
    return RequestInterceptor(
        queue=queue,
        cache=cache,
        dispatcher=dispatcher,
        network=network,
        clock=clock,
    )


@pytest.fixture()
def orchestrator(
    queue: InMemoryOperationStore,
    cache: ResponseCache,
    dispatcher: NotificationDispatcher,
    network: Network,
    clock: FakeClock,
) -> SyncOrchestrator:
    return SyncOrchestrator(
        queue=queue,
        cache=cache,
        dispatcher=dispatcher,
        network=network,
        max_retries=5,
        max_age=timedelta(days=7),
        clock=clock,
    )


@pytest.fixture()
def config() -> SmartCacheConfig:
    return SmartCacheConfig(
        cache_name="test-cache",
        notification_display_seconds=0,
    )


@pytest.fixture()
async def smartcache(
    config: SmartCacheConfig,
    mock_transport: httpx.MockTransport,
    clock: FakeClock,
):
    engine = SmartCache(config, transport=mock_transport, clock=clock)
    yield engine
    await engine.aclose()


@pytest.fixture()
def app(smartcache: SmartCache) -> Litestar:
    return Litestar(
        route_handlers=[create_smartcache_router(engine=smartcache)],
    )


# ---------------------------------------------------------------------------
# SQLAlchemy fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
async def async_engine():
    from sqlalchemy.ext.asyncio import create_async_engine

    from litestar_smartcache.contrib.sqlalchemy.models import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def async_session_factory(async_engine):
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
