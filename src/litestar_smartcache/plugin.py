"""Router factory for litestar-smartcache."""

from __future__ import annotations

from litestar import Router
from litestar.di import Provide

from litestar_smartcache.engine import SmartCache
from litestar_smartcache.exceptions import EXCEPTION_HANDLERS
from litestar_smartcache.routes.notifications import NotificationController
from litestar_smartcache.routes.queue import QueueController
from litestar_smartcache.routes.sync import SyncController


def create_smartcache_router(
    *,
    engine: SmartCache,
    path: str = "/",
) -> Router:
    """Create a configured Litestar router.

    Args:
        engine: Smart cache components to expose.
        path: Mount path for the router.

    Returns:
        A Litestar Router with sync, queue and notification endpoints.
    """
    return Router(
        path=path,
        route_handlers=[
            SyncController,
            QueueController,
            NotificationController,
        ],
        dependencies={
            "engine": Provide(lambda: engine, sync_to_thread=False),
        },
        exception_handlers=EXCEPTION_HANDLERS,
    )
