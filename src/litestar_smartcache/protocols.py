"""Storage and observer protocols."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from litestar_smartcache.events import NotificationEvent
from litestar_smartcache.types import OperationDraft, PendingOperation

__all__ = [
    "BlobStore",
    "NotificationObserver",
    "PendingOperationStore",
]


@runtime_checkable
class PendingOperationStore(Protocol):
    """Durable storage for the pending operation queue.

    Full lifecycle: enqueue -> list_all ->
    update_retry_count* -> remove.

    Every method is atomic on its own and raises ``StorageError`` when
    the backing store is unavailable.
    """

    async def enqueue(self, draft: OperationDraft) -> int:
        """Persist a new operation. Returns its ID."""
        ...

    async def list_all(self) -> list[PendingOperation]:
        """Return every pending operation in insertion order."""
        ...

    async def get(self, operation_id: int) -> PendingOperation | None:
        """Return one pending operation, or None when absent."""
        ...

    async def update_retry_count(
        self, operation_id: int, retry_count: int
    ) -> None:
        """Raise the retry count of an operation.

        Lower or equal values and unknown IDs are ignored.
        """
        ...

    async def remove(self, operation_id: int) -> None:
        """Delete an operation. Unknown IDs are ignored."""
        ...


@runtime_checkable
class BlobStore(Protocol):
    """Opaque key-value storage backing the response cache."""

    async def put(self, key: str, value: bytes) -> None:
        """Store a blob, overwriting any previous value."""
        ...

    async def get(self, key: str) -> bytes | None:
        """Return a blob, or None when absent."""
        ...

    async def list_keys(self, prefix: str = "") -> list[str]:
        """Return keys starting with ``prefix``."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a blob. Unknown keys are ignored."""
        ...


@runtime_checkable
class NotificationObserver(Protocol):
    """Renders notifications, one at a time."""

    async def show(self, event: NotificationEvent) -> None:
        """Start displaying an event."""
        ...

    async def hide(self, event: NotificationEvent) -> None:
        """Stop displaying an event."""
        ...
