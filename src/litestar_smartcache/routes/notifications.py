"""Notification feed endpoint."""

from __future__ import annotations

from typing import Annotated

from litestar import Controller, get
from litestar.params import Dependency

from litestar_smartcache.engine import SmartCache
from litestar_smartcache.schemas import NotificationResponse


class NotificationController(Controller):
    path = "/notifications"
    tags = ["notifications"]

    @get("/")
    async def recent_notifications(
        self,
        engine: Annotated[SmartCache, Dependency(skip_validation=True)],
    ) -> list[NotificationResponse]:
        """Most recently displayed notifications, oldest first."""
        return [
            NotificationResponse.from_event(event)
            for event in engine.feed.recent()
        ]
