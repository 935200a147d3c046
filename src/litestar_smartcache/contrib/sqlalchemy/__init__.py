"""SQLAlchemy-backed queue and blob stores."""

from litestar_smartcache.contrib.sqlalchemy.blob_store import (
    SQLAlchemyBlobStore,
)
from litestar_smartcache.contrib.sqlalchemy.models import (
    Base,
    CachedBlobModel,
    PendingOperationModel,
)
from litestar_smartcache.contrib.sqlalchemy.queue_store import (
    SQLAlchemyOperationStore,
)

__all__ = [
    "Base",
    "CachedBlobModel",
    "PendingOperationModel",
    "SQLAlchemyBlobStore",
    "SQLAlchemyOperationStore",
]
