"""SQLAlchemy 2.0 async models for the queue and the blob cache."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, LargeBinary, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all smartcache models."""


class PendingOperationModel(Base):
    """Queued mutating request awaiting replay."""

    __tablename__ = "smartcache_pending_operations"
    __table_args__ = (
        Index(
            "ix_smartcache_pending_operations_enqueued_at",
            "enqueued_at",
        ),
        # IDs define replay order and must never be reused.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    store_name: Mapped[str] = mapped_column(String(255), index=True)
    url: Mapped[str] = mapped_column(Text)
    method: Mapped[str] = mapped_column(String(16))
    headers: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    body: Mapped[bytes] = mapped_column(LargeBinary, default=b"")
    content_type: Mapped[str] = mapped_column(String(255), default="")
    enqueued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(tz=UTC),
    )
    retry_count: Mapped[int] = mapped_column(default=0)


class CachedBlobModel(Base):
    """Opaque cached blob keyed by string."""

    __tablename__ = "smartcache_blobs"

    key: Mapped[str] = mapped_column(String(2048), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(tz=UTC),
        onupdate=lambda: datetime.now(tz=UTC),
    )
