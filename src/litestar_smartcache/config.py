"""Smart cache configuration."""

from __future__ import annotations

from datetime import timedelta

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SmartCacheConfig(BaseSettings):
    """Runtime config for the offline cache and replay queue.

    Reads from environment variables with SMARTCACHE_ prefix.
    """

    model_config = SettingsConfigDict(env_prefix="SMARTCACHE_")

    # Store identifiers
    cache_name: str = "smart-cache-v1"
    queue_db_name: str = "smart-cache-db"
    queue_store_name: str = "offline-requests"
    queue_db_version: int = Field(default=2, ge=1)

    # Replay policy
    max_retries: int = Field(default=5, ge=0)
    max_age: timedelta = timedelta(days=7)

    # Notifications
    show_notifications: bool = True
    notification_display_seconds: float = Field(default=3.0, ge=0)
    notification_feed_size: int = Field(default=50, ge=1)

    request_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("cache_name")
    @classmethod
    def _check_cache_name(cls, value: str) -> str:
        # "|" separates the cache name from the request in blob keys.
        if not value or "|" in value:
            raise ValueError("cache_name must be non-empty and without '|'")
        return value

    @field_validator("max_age")
    @classmethod
    def _check_max_age(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("max_age must be positive")
        return value

    @property
    def queue_namespace(self) -> str:
        """Logical queue name, unique per database, store and version."""
        return (
            f"{self.queue_db_name}/{self.queue_store_name}"
            f"@v{self.queue_db_version}"
        )
