"""Offline cache and replay queue for httpx clients, with a Litestar router."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "BlobStore",
    "NetworkError",
    "NotificationEvent",
    "NotificationKind",
    "OperationNotFoundError",
    "PendingOperation",
    "PendingOperationStore",
    "SmartCache",
    "SmartCacheConfig",
    "SmartCacheError",
    "StorageError",
    "SyncInProgressError",
    "SyncTrigger",
    "__version__",
    "create_smartcache_router",
]

if TYPE_CHECKING:
    from litestar_smartcache.config import SmartCacheConfig
    from litestar_smartcache.engine import SmartCache
    from litestar_smartcache.events import (
        NotificationEvent,
        NotificationKind,
        SyncTrigger,
    )
    from litestar_smartcache.exceptions import (
        NetworkError,
        OperationNotFoundError,
        SmartCacheError,
        StorageError,
        SyncInProgressError,
    )
    from litestar_smartcache.plugin import create_smartcache_router
    from litestar_smartcache.protocols import BlobStore, PendingOperationStore
    from litestar_smartcache.types import PendingOperation


def __getattr__(name: str):
    # Lazy imports to avoid loading all submodules on package import.
    if name == "SmartCacheConfig":
        from litestar_smartcache.config import SmartCacheConfig

        return SmartCacheConfig
    if name == "SmartCache":
        from litestar_smartcache.engine import SmartCache

        return SmartCache
    if name == "create_smartcache_router":
        from litestar_smartcache.plugin import create_smartcache_router

        return create_smartcache_router
    if name == "PendingOperation":
        from litestar_smartcache.types import PendingOperation

        return PendingOperation
    if name in ("NotificationEvent", "NotificationKind", "SyncTrigger"):
        from litestar_smartcache import events

        return getattr(events, name)
    if name in ("BlobStore", "PendingOperationStore"):
        from litestar_smartcache import protocols

        return getattr(protocols, name)
    if name in (
        "NetworkError",
        "OperationNotFoundError",
        "SmartCacheError",
        "StorageError",
        "SyncInProgressError",
    ):
        from litestar_smartcache import exceptions

        return getattr(exceptions, name)
    raise AttributeError(
        f"module 'litestar_smartcache' has no attribute {name!r}"
    )
