"""Serialized delivery of notifications to observers."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque

from litestar_smartcache.events import NotificationEvent, NotificationLevel
from litestar_smartcache.protocols import NotificationObserver

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Shows published events one at a time, in publish order.

    A single display slot is held for ``display_seconds`` per event;
    events published meanwhile wait in a FIFO. Nothing is coalesced or
    dropped while the dispatcher is enabled.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        display_seconds: float = 3.0,
        observers: list[NotificationObserver] | None = None,
    ) -> None:
        self.enabled = enabled
        self._display_seconds = display_seconds
        self._observers: list[NotificationObserver] = list(observers or [])
        self._pending: deque[NotificationEvent] = deque()
        self._current: NotificationEvent | None = None
        self._task: asyncio.Task[None] | None = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def current(self) -> NotificationEvent | None:
        """Event occupying the display slot, if any."""
        return self._current

    @property
    def pending(self) -> int:
        return len(self._pending)

    def subscribe(self, observer: NotificationObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: NotificationObserver) -> None:
        with contextlib.suppress(ValueError):
            self._observers.remove(observer)

    def publish(self, event: NotificationEvent) -> None:
        """Queue an event for display. Must be called from the event loop."""
        if not self.enabled:
            logger.debug("Notifications disabled, dropping %s", event.kind)
            return
        self._pending.append(event)
        if self._task is None:
            self._idle.clear()
            self._task = asyncio.create_task(self._display_loop())

    async def join(self) -> None:
        """Wait until every published event has been shown and hidden."""
        await self._idle.wait()

    async def aclose(self) -> None:
        """Stop displaying and forget pending events."""
        self._pending.clear()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _display_loop(self) -> None:
        try:
            while self._pending:
                event = self._pending.popleft()
                self._current = event
                for observer in list(self._observers):
                    try:
                        await observer.show(event)
                    except Exception:
                        logger.exception(
                            "Observer %r failed to show", observer
                        )
                await asyncio.sleep(self._display_seconds)
                for observer in list(self._observers):
                    try:
                        await observer.hide(event)
                    except Exception:
                        logger.exception(
                            "Observer %r failed to hide", observer
                        )
                self._current = None
        finally:
            self._current = None
            self._task = None
            self._idle.set()


class LoggingObserver:
    """Writes each notification to the log."""

    def __init__(self, logger_name: str = __name__) -> None:
        self._logger = logging.getLogger(logger_name)

    async def show(self, event: NotificationEvent) -> None:
        text, level = event.describe()
        if level is NotificationLevel.ERROR:
            self._logger.warning(text)
        else:
            self._logger.info(text)

    async def hide(self, event: NotificationEvent) -> None:
        return None


class NotificationFeed:
    """Keeps the most recently displayed notifications."""

    def __init__(self, maxlen: int = 50) -> None:
        self._events: deque[NotificationEvent] = deque(maxlen=maxlen)

    async def show(self, event: NotificationEvent) -> None:
        self._events.append(event)

    async def hide(self, event: NotificationEvent) -> None:
        return None

    def recent(self) -> list[NotificationEvent]:
        return list(self._events)
