"""Pending operation endpoints."""

from __future__ import annotations

from typing import Annotated, ClassVar

from litestar import Controller, delete, get
from litestar.params import Dependency

from litestar_smartcache.engine import SmartCache
from litestar_smartcache.exceptions import OperationNotFoundError
from litestar_smartcache.schemas import PendingOperationResponse


class QueueController(Controller):
    """Inspect and prune the pending operation queue."""

    path = "/queue"
    tags: ClassVar[list[str]] = ["queue"]

    @get("/")
    async def list_operations(
        self,
        engine: Annotated[SmartCache, Dependency(skip_validation=True)],
    ) -> list[PendingOperationResponse]:
        """List pending operations in replay order."""
        operations = await engine.queue.list_all()
        return [
            PendingOperationResponse.from_operation(operation)
            for operation in operations
        ]

    @get("/{operation_id:int}")
    async def get_operation(
        self,
        operation_id: int,
        engine: Annotated[SmartCache, Dependency(skip_validation=True)],
    ) -> PendingOperationResponse:
        operation = await engine.queue.get(operation_id)
        if operation is None:
            raise OperationNotFoundError(operation_id)
        return PendingOperationResponse.from_operation(operation)

    @delete("/{operation_id:int}")
    async def discard_operation(
        self,
        operation_id: int,
        engine: Annotated[SmartCache, Dependency(skip_validation=True)],
    ) -> None:
        """Drop a queued operation without replaying it."""
        if await engine.queue.get(operation_id) is None:
            raise OperationNotFoundError(operation_id)
        await engine.queue.remove(operation_id)
