"""Exception types and HTTP mapping for litestar-smartcache."""

from __future__ import annotations

from litestar import Request, Response


class SmartCacheError(Exception):
    """Base class for smart cache failures."""


class NetworkError(SmartCacheError):
    """An outbound call could not reach the server.

    Covers connection failures and timeouts. Always transient: callers
    fall back to the cache or defer the operation to the next sync pass.
    """

    def __init__(
        self,
        method: str,
        url: str,
        cause: Exception | None = None,
    ) -> None:
        self.method = method
        self.url = url
        self.cause = cause
        super().__init__(f"Network request failed for {method} {url}")


class StorageError(SmartCacheError):
    """The durable queue or the blob store is unavailable."""

    def __init__(
        self,
        operation: str,
        cause: Exception | None = None,
    ) -> None:
        self.operation = operation
        self.cause = cause
        message = f"Storage operation {operation!r} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class OperationNotFoundError(SmartCacheError):
    """Queued operation with given ID was not found."""

    def __init__(self, operation_id: int) -> None:
        self.operation_id = operation_id
        super().__init__(f"Pending operation {operation_id!r} not found")


class SyncInProgressError(SmartCacheError):
    """A sync pass is already running."""

    def __init__(self) -> None:
        super().__init__("A sync pass is already in progress")


def _error_response(
    request: Request, detail: str, code: str, status_code: int
) -> Response:
    return Response(
        content={"detail": detail, "code": code},
        status_code=status_code,
    )


def handle_operation_not_found(
    request: Request, exc: OperationNotFoundError
) -> Response:
    """Map OperationNotFoundError to 404."""
    return _error_response(request, str(exc), "not_found", 404)


def handle_sync_in_progress(
    request: Request, exc: SyncInProgressError
) -> Response:
    """Map SyncInProgressError to 409."""
    return _error_response(request, str(exc), "sync_in_progress", 409)


def handle_storage_error(request: Request, exc: StorageError) -> Response:
    """Map StorageError to 503."""
    return _error_response(request, str(exc), "storage_error", 503)


def handle_smartcache_error(
    request: Request, exc: SmartCacheError
) -> Response:
    """Map generic SmartCacheError to 400."""
    return _error_response(request, str(exc), "smartcache_error", 400)


EXCEPTION_HANDLERS = {
    OperationNotFoundError: handle_operation_not_found,
    SyncInProgressError: handle_sync_in_progress,
    StorageError: handle_storage_error,
    SmartCacheError: handle_smartcache_error,
}
