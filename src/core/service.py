"""Relay service: subscription lifecycle and the single dispatch loop.

Every channel event and hub callback goes through one asyncio queue and is
processed to completion before the next one starts, so the topic registry and
the delivery ledger are never mutated concurrently. Hub and chat calls are
awaited inside the loop and state changes only after their result is known.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

from core.config import DeliveryConfig
from core.dedup import DeliveryLedger
from core.directive import parse_directive
from core.dispatcher import NotificationDispatcher
from core.errors import FeedParseError, SubscriptionError
from core.models import ChannelEvent, ChannelEventKind, FeedCallback, SubscriptionMode, Topic
from core.ports import FeedParserPort, HubPort, NotifierPort
from core.registry import TopicRegistry

LOGGER = logging.getLogger(__name__)

RelayEvent = Union[ChannelEvent, FeedCallback]

_STOP = object()


class RelayService:
    """Owns the registry and ledger and reacts to relay events."""

    def __init__(
        self,
        hub: HubPort,
        feed_parser: FeedParserPort,
        notifier: NotifierPort,
        delivery_config: Optional[DeliveryConfig] = None,
    ) -> None:
        self._hub = hub
        self._feed_parser = feed_parser
        self.registry = TopicRegistry()
        self.ledger = DeliveryLedger()
        self._dispatcher = NotificationDispatcher(
            registry=self.registry,
            ledger=self.ledger,
            notifier=notifier,
            delivery_config=delivery_config or DeliveryConfig(),
        )
        self._queue: "asyncio.Queue[object]" = asyncio.Queue()
        # Feed URLs with a subscribe request in flight; the hub may verify
        # before the request returns.
        self._pending: set[str] = set()

    def submit(self, event: RelayEvent) -> None:
        """Queue an event for the dispatch loop without waiting for it."""

        self._queue.put_nowait(event)

    def stop(self) -> None:
        """Let run() return once the events queued so far are processed."""

        self._queue.put_nowait(_STOP)

    async def run(self) -> None:
        LOGGER.info("Relay dispatch loop started")
        while True:
            event = await self._queue.get()
            try:
                if event is _STOP:
                    break
                await self.process(event)  # type: ignore[arg-type]
            except Exception:
                LOGGER.exception("Error while processing %s", type(event).__name__)
            finally:
                self._queue.task_done()
        LOGGER.info("Relay dispatch loop stopped")

    async def process(self, event: RelayEvent) -> None:
        """Process one event; only call this from the dispatch loop or tests."""

        if isinstance(event, ChannelEvent):
            if event.kind is ChannelEventKind.DELETED:
                await self._on_channel_deleted(event.channel_id)
            else:
                await self._on_channel_topic(event)
        elif isinstance(event, FeedCallback):
            await self._on_feed_callback(event)
        else:
            raise TypeError(f"Unsupported relay event: {event!r}")

    def expects_verification(self, mode: SubscriptionMode, feed_url: str) -> bool:
        """Whether a hub intent-verification request should be confirmed."""

        subscribed = self.registry.find_by_feed_url(feed_url) is not None
        if mode is SubscriptionMode.SUBSCRIBE:
            return subscribed or feed_url in self._pending
        return not subscribed and feed_url not in self._pending

    async def _on_channel_topic(self, event: ChannelEvent) -> None:
        channel_id = event.channel_id
        directive = parse_directive(event.topic_text)
        current = self.registry.get(channel_id)

        if directive is None:
            if current is not None and event.kind is ChannelEventKind.UPDATED:
                LOGGER.info("Channel %s dropped its directive for %s", channel_id, current.feed_url)
                self.registry.remove_by_channel_id(channel_id)
                await self._release_feed(current.feed_url)
            return

        wanted = Topic(
            feed_url=directive.feed_url,
            channel_id=channel_id,
            announce_all=directive.announce_all,
        )
        if current == wanted:
            LOGGER.debug("Channel %s already subscribed to %s", channel_id, wanted.feed_url)
            return

        if current is not None and current.feed_url == wanted.feed_url:
            # Same feed, only the announce flag changed; the hub already has it.
            self.registry.upsert(channel_id, wanted.feed_url, wanted.announce_all)
            LOGGER.info("Channel %s set announce_all=%s", channel_id, wanted.announce_all)
            return

        self._pending.add(wanted.feed_url)
        try:
            await self._hub.subscribe(wanted.feed_url, SubscriptionMode.SUBSCRIBE)
        except SubscriptionError as exc:
            LOGGER.error("Subscription for channel %s failed: %s", channel_id, exc)
            return
        finally:
            self._pending.discard(wanted.feed_url)

        self.registry.upsert(channel_id, wanted.feed_url, wanted.announce_all)
        LOGGER.info(
            "Channel %s subscribed to %s (announce_all=%s)",
            channel_id,
            wanted.feed_url,
            wanted.announce_all,
        )

        if current is not None and current.feed_url != wanted.feed_url:
            await self._release_feed(current.feed_url)

    async def _on_channel_deleted(self, channel_id: str) -> None:
        # The channel is gone, so the entry goes even if the hub call fails.
        topic = self.registry.remove_by_channel_id(channel_id)
        if topic is None:
            return
        LOGGER.info("Channel %s deleted, releasing %s", channel_id, topic.feed_url)
        await self._release_feed(topic.feed_url)

    async def _release_feed(self, feed_url: str) -> None:
        """Unsubscribe a feed no registered channel uses any more.

        When another channel still points at the same feed the hub keeps the
        subscription, so removing one of them sends no unsubscribe at all.
        """

        if self.registry.find_by_feed_url(feed_url) is not None:
            LOGGER.debug("Feed %s still used by another channel", feed_url)
            return
        try:
            await self._hub.subscribe(feed_url, SubscriptionMode.UNSUBSCRIBE)
        except SubscriptionError as exc:
            LOGGER.error("Unsubscribe failed: %s", exc)
            return
        LOGGER.info("Unsubscribed from %s", feed_url)

    async def _on_feed_callback(self, callback: FeedCallback) -> None:
        try:
            items = self._feed_parser.parse(callback.payload, callback.topic_hint)
        except FeedParseError as exc:
            LOGGER.error("Dropping hub callback: %s", exc)
            return

        delivered = 0
        for item in items:
            try:
                if await self._dispatcher.handle(item):
                    delivered += 1
            except Exception:
                LOGGER.exception("Failed to deliver %s to its channel", item.guid)

        LOGGER.info("Hub callback processed: items=%s, delivered=%s", len(items), delivered)
