"""Thin network access layer over an httpx transport."""

from __future__ import annotations

import httpx

from litestar_smartcache.exceptions import NetworkError


class Network:
    """Sends requests over a real transport and reads their bodies.

    Transport-level failures, timeouts included, surface as
    ``NetworkError``. HTTP error statuses are returned as responses.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        *,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._owns_transport = transport is None
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._timeout = httpx.Timeout(timeout_seconds)

    def build_request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Request:
        """Build a request carrying the configured timeout."""
        return httpx.Request(
            method,
            url,
            headers=headers,
            content=content,
            extensions={"timeout": self._timeout.as_dict()},
        )

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Issue one request and read the full response body."""
        request.extensions.setdefault("timeout", self._timeout.as_dict())
        try:
            response = await self._transport.handle_async_request(request)
        except httpx.RequestError as exc:
            raise self._network_error(request, exc) from exc
        response.request = request
        try:
            await response.aread()
        except httpx.RequestError as exc:
            await response.aclose()
            raise self._network_error(request, exc) from exc
        return response

    def _network_error(
        self, request: httpx.Request, exc: httpx.RequestError
    ) -> NetworkError:
        return NetworkError(
            method=request.method,
            url=str(request.url),
            cause=exc,
        )

    async def aclose(self) -> None:
        """Close the transport when owned."""
        if self._owns_transport:
            await self._transport.aclose()
