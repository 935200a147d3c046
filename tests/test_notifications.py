"""Tests for serialized notification delivery."""

import asyncio
import logging

from litestar_smartcache.events import NotificationEvent, NotificationKind
from litestar_smartcache.notifications import (
    LoggingObserver,
    NotificationDispatcher,
    NotificationFeed,
)


def _event(n: int, kind=NotificationKind.OPERATION_QUEUED):
    return NotificationEvent(
        kind=kind, url=f"https://api.test/{n}", method="POST"
    )


async def test_events_shown_in_publish_order(dispatcher, observer):
    """Burst of events is shown one by one in FIFO order."""
    events = [_event(n) for n in range(5)]
    for event in events:
        dispatcher.publish(event)

    await dispatcher.join()

    assert observer.shown == events


async def test_displays_never_overlap(observer):
    dispatcher = NotificationDispatcher(
        display_seconds=0.01, observers=[observer]
    )
    for n in range(3):
        dispatcher.publish(_event(n))

    await dispatcher.join()

    assert observer.max_showing == 1
    assert [action for action, _ in observer.log] == [
        "show",
        "hide",
    ] * 3


async def test_each_event_shown_exactly_once(dispatcher, observer):
    """Identical events are not coalesced."""
    event = _event(1)
    dispatcher.publish(event)
    dispatcher.publish(event)

    await dispatcher.join()

    assert observer.shown == [event, event]


async def test_events_published_during_display_are_queued(observer):
    dispatcher = NotificationDispatcher(
        display_seconds=0.05, observers=[observer]
    )
    first, second = _event(1), _event(2)
    dispatcher.publish(first)
    await asyncio.sleep(0.01)

    assert dispatcher.current == first
    dispatcher.publish(second)
    assert dispatcher.pending == 1

    await dispatcher.join()

    assert observer.shown == [first, second]
    assert dispatcher.current is None
    assert dispatcher.pending == 0


async def test_disabled_dispatcher_drops_events(observer):
    dispatcher = NotificationDispatcher(
        enabled=False, display_seconds=0, observers=[observer]
    )
    dispatcher.publish(_event(1))

    await dispatcher.join()

    assert observer.log == []
    assert dispatcher.pending == 0


async def test_failing_observer_does_not_stop_delivery(dispatcher, observer):
    class Broken:
        async def show(self, event):
            raise RuntimeError("display crashed")

        async def hide(self, event):
            raise RuntimeError("display crashed")

    dispatcher.subscribe(Broken())
    dispatcher.publish(_event(1))
    dispatcher.publish(_event(2))

    await dispatcher.join()

    assert len(observer.shown) == 2


async def test_unsubscribe_stops_delivery(dispatcher, observer):
    dispatcher.unsubscribe(observer)
    dispatcher.unsubscribe(observer)
    dispatcher.publish(_event(1))

    await dispatcher.join()

    assert observer.log == []


async def test_join_without_events_returns_immediately(dispatcher):
    await asyncio.wait_for(dispatcher.join(), timeout=1)


async def test_aclose_discards_pending(observer):
    dispatcher = NotificationDispatcher(
        display_seconds=10, observers=[observer]
    )
    dispatcher.publish(_event(1))
    dispatcher.publish(_event(2))
    await asyncio.sleep(0)

    await dispatcher.aclose()

    assert dispatcher.pending == 0
    assert dispatcher.current is None
    assert len(observer.shown) == 1


async def test_feed_keeps_most_recent():
    feed = NotificationFeed(maxlen=2)
    events = [_event(n) for n in range(3)]
    for event in events:
        await feed.show(event)
        await feed.hide(event)

    assert feed.recent() == events[1:]


async def test_logging_observer_levels(caplog):
    observer = LoggingObserver("smartcache.test")
    with caplog.at_level(logging.INFO, logger="smartcache.test"):
        await observer.show(_event(1))
        await observer.show(
            NotificationEvent(
                kind=NotificationKind.SYNC_FAILED,
                url="https://api.test/2",
                method="PUT",
                detail="status 500",
            )
        )

    assert [record.levelno for record in caplog.records] == [
        logging.INFO,
        logging.WARNING,
    ]
    assert caplog.records[1].getMessage() == (
        "Failed to sync PUT https://api.test/2 - status 500"
    )
