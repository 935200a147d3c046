"""httpx transport that routes every request through the interceptor."""

from __future__ import annotations

import httpx

from litestar_smartcache.interceptor import RequestInterceptor


class OfflineTransport(httpx.AsyncBaseTransport):
    """Mount on an ``httpx.AsyncClient`` to make it offline tolerant.

    The real network transport belongs to the interceptor's ``Network``
    and outlives any single client, so closing this transport only
    waits for outstanding cache writes.
    """

    def __init__(self, interceptor: RequestInterceptor) -> None:
        self._interceptor = interceptor

    async def handle_async_request(
        self, request: httpx.Request
    ) -> httpx.Response:
        return await self._interceptor.handle(request)

    async def aclose(self) -> None:
        await self._interceptor.wait_background()
