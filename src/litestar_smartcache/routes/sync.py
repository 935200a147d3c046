"""Sync control endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from litestar import Controller, get, post
from litestar.params import Dependency

from litestar_smartcache.engine import SmartCache
from litestar_smartcache.events import SyncTrigger
from litestar_smartcache.exceptions import SyncInProgressError
from litestar_smartcache.schemas import (
    ControlMessageRequest,
    ControlMessageResponse,
    SyncReportResponse,
    SyncStatusResponse,
)

logger = logging.getLogger(__name__)


class SyncController(Controller):
    """Manual sync trigger and control channel."""

    path = "/sync"
    tags = ["sync"]

    @get("/health")
    async def sync_health(self) -> dict[str, str]:
        """Healthcheck endpoint for sync routes."""
        return {"status": "ok"}

    @get("/status")
    async def sync_status(
        self,
        engine: Annotated[SmartCache, Dependency(skip_validation=True)],
    ) -> SyncStatusResponse:
        """Report orchestrator state, queue size and the last pass."""
        operations = await engine.queue.list_all()
        last_report = engine.orchestrator.last_report
        return SyncStatusResponse(
            state=str(engine.orchestrator.state),
            pending=len(operations),
            last_report=(
                SyncReportResponse.from_report(last_report)
                if last_report is not None
                else None
            ),
        )

    @post("/")
    async def run_sync(
        self,
        engine: Annotated[SmartCache, Dependency(skip_validation=True)],
    ) -> SyncReportResponse:
        """Run a sync pass and wait for it to finish."""
        report = await engine.orchestrator.trigger(SyncTrigger.MANUAL)
        if report is None:
            raise SyncInProgressError()
        return SyncReportResponse.from_report(report)

    @post("/messages", status_code=202)
    async def post_message(
        self,
        data: ControlMessageRequest,
        engine: Annotated[SmartCache, Dependency(skip_validation=True)],
    ) -> ControlMessageResponse:
        """Accept a control message; sync messages start a pass."""
        accepted = engine.orchestrator.handle_message(
            data.model_dump(exclude_none=True)
        )
        logger.debug("Control message %r accepted=%s", data.type, accepted)
        return ControlMessageResponse(accepted=accepted)
