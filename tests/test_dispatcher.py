from __future__ import annotations

import asyncio

import pytest

from core.config import DeliveryConfig
from core.dedup import DeliveryLedger
from core.dispatcher import NotificationDispatcher
from core.models import FeedItem
from core.registry import TopicRegistry

FEED_URL = "https://www.youtube.com/xml/feeds/videos.xml?channel_id=ABC"


class FakeNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[str, str]] = []
        self._fail = fail

    async def send(self, channel_id: str, body: str) -> None:
        if self._fail:
            raise RuntimeError("chat platform unavailable")
        self.sent.append((channel_id, body))


def _make_dispatcher(notifier: FakeNotifier, announce_all: bool = False):
    registry = TopicRegistry()
    registry.upsert("-1001", FEED_URL, announce_all)
    ledger = DeliveryLedger()
    dispatcher = NotificationDispatcher(
        registry=registry,
        ledger=ledger,
        notifier=notifier,
        delivery_config=DeliveryConfig(mention_token="@everyone"),
    )
    return dispatcher, ledger


def _item(guid: str = "v1", feed_url: str = FEED_URL) -> FeedItem:
    return FeedItem(guid=guid, link=f"https://www.youtube.com/watch?v={guid}", source_feed_url=feed_url)


def test_same_guid_is_delivered_once() -> None:
    notifier = FakeNotifier()
    dispatcher, ledger = _make_dispatcher(notifier)

    assert asyncio.run(dispatcher.handle(_item())) is True
    assert asyncio.run(dispatcher.handle(_item())) is False

    assert notifier.sent == [("-1001", "https://www.youtube.com/watch?v=v1")]
    assert "v1" in ledger


def test_announce_all_prefixes_mention_token() -> None:
    notifier = FakeNotifier()
    dispatcher, _ = _make_dispatcher(notifier, announce_all=True)

    asyncio.run(dispatcher.handle(_item("v2")))

    assert notifier.sent == [("-1001", "@everyone https://www.youtube.com/watch?v=v2")]


def test_unmatched_item_is_dropped_without_touching_ledger() -> None:
    notifier = FakeNotifier()
    dispatcher, ledger = _make_dispatcher(notifier)

    delivered = asyncio.run(dispatcher.handle(_item(feed_url="https://example.com/other.xml")))

    assert delivered is False
    assert notifier.sent == []
    assert len(ledger) == 0


def test_failed_send_is_not_recorded() -> None:
    dispatcher, ledger = _make_dispatcher(FakeNotifier(fail=True))

    with pytest.raises(RuntimeError):
        asyncio.run(dispatcher.handle(_item()))

    assert "v1" not in ledger
