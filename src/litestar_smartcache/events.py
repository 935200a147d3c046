"""Notification events and sync trigger messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

SYNC_MESSAGE_TYPE = "SYNC_OFFLINE_REQUESTS"
ONLINE_MESSAGE_TYPE = "ONLINE"


class NotificationKind(StrEnum):
    CACHE_SERVED = "cache_served"
    OPERATION_QUEUED = "operation_queued"
    OPERATION_SYNCED = "operation_synced"
    SYNC_FAILED = "sync_failed"


class NotificationLevel(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class SyncTrigger(StrEnum):
    """Why a sync pass was requested. Both start the same pass."""

    RECONNECT = "reconnect"
    MANUAL = "manual"


@dataclass(frozen=True)
class NotificationEvent:
    """A transient event published to observers."""

    kind: NotificationKind
    url: str
    method: str | None = None
    detail: str | None = None

    def to_message(self) -> dict[str, str | None]:
        return {"kind": str(self.kind), "url": self.url, "method": self.method}

    def describe(self) -> tuple[str, NotificationLevel]:
        """Return the human readable text and its display level."""
        method = self.method or ""
        match self.kind:
            case NotificationKind.OPERATION_QUEUED:
                return (
                    f"Saved {method} request to {self.url} for later sync.",
                    NotificationLevel.INFO,
                )
            case NotificationKind.CACHE_SERVED:
                return (
                    f"You're offline. Loaded {self.url} from cache.",
                    NotificationLevel.SUCCESS,
                )
            case NotificationKind.OPERATION_SYNCED:
                return (
                    f"Synced {method} to {self.url}",
                    NotificationLevel.SUCCESS,
                )
            case NotificationKind.SYNC_FAILED:
                text = f"Failed to sync {method} {self.url}"
                if self.detail:
                    text = f"{text} - {self.detail}"
                return text, NotificationLevel.ERROR


def parse_control_message(message: Any) -> SyncTrigger | None:
    """Map a control channel message to a sync trigger.

    Unknown or malformed messages are ignored.
    """
    if not isinstance(message, dict):
        logger.debug("Ignoring non-mapping control message: %r", message)
        return None
    message_type = message.get("type")
    if message_type == SYNC_MESSAGE_TYPE:
        return SyncTrigger.MANUAL
    if message_type == ONLINE_MESSAGE_TYPE:
        return SyncTrigger.RECONNECT
    logger.debug("Ignoring control message of type %r", message_type)
    return None
