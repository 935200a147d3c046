"""Litestar example app with an offline-tolerant upstream client.

``/orders`` proxies an upstream API through the smart cache. Toggle
``upstream.online`` (``POST /upstream/offline`` / ``POST /upstream/online``)
to watch reads fall back to the cache and writes get queued, then
``POST /sync`` to replay them.
"""

from __future__ import annotations

import itertools

import httpx
from litestar import Litestar, Request, Response, get, post

from litestar_smartcache.config import SmartCacheConfig
from litestar_smartcache.engine import SmartCache
from litestar_smartcache.events import SyncTrigger
from litestar_smartcache.plugin import create_smartcache_router

UPSTREAM_URL = "https://upstream.example"


class SimulatedUpstream:
    """In-process stand-in for a remote orders API."""

    def __init__(self) -> None:
        self.online = True
        self.orders: list[dict] = []
        self._ids = itertools.count(1)

    def handle(self, request: httpx.Request) -> httpx.Response:
        if not self.online:
            raise httpx.ConnectError("upstream unreachable", request=request)
        if request.method == "POST":
            order = {"id": next(self._ids), "body": request.content.decode()}
            self.orders.append(order)
            return httpx.Response(201, json=order)
        return httpx.Response(200, json=self.orders)


upstream = SimulatedUpstream()
engine = SmartCache(
    SmartCacheConfig(notification_display_seconds=0.5),
    transport=httpx.MockTransport(upstream.handle),
)


async def _proxy(request: httpx.Request) -> Response:
    async with engine.client() as client:
        upstream_response = await client.send(request)
    return Response(
        content=upstream_response.content,
        status_code=upstream_response.status_code,
        media_type=upstream_response.headers.get(
            "content-type", "application/json"
        ),
    )


@get("/orders")
async def list_orders() -> Response:
    return await _proxy(httpx.Request("GET", f"{UPSTREAM_URL}/orders"))


@post("/orders")
async def create_order(request: Request) -> Response:
    body = await request.body()
    return await _proxy(
        httpx.Request(
            "POST",
            f"{UPSTREAM_URL}/orders",
            content=body,
            headers={"content-type": "application/json"},
        )
    )


@post("/upstream/offline", status_code=204)
async def go_offline() -> None:
    upstream.online = False


@post("/upstream/online", status_code=204)
async def go_online() -> None:
    upstream.online = True
    engine.orchestrator.trigger_in_background(SyncTrigger.RECONNECT)


app = Litestar(
    route_handlers=[
        list_orders,
        create_order,
        go_offline,
        go_online,
        create_smartcache_router(engine=engine),
    ],
    on_startup=[engine.startup],
    on_shutdown=[engine.aclose],
)
