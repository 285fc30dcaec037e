"""Feed item dispatch.

This module is integration-agnostic. It only relies on the notifier port,
the topic registry and the delivery ledger.
"""

from __future__ import annotations

import logging

from core.config import DeliveryConfig
from core.dedup import DeliveryLedger
from core.models import FeedItem, Topic
from core.ports import NotifierPort
from core.registry import TopicRegistry

LOGGER = logging.getLogger(__name__)


def format_message(item: FeedItem, topic: Topic, mention_token: str) -> str:
    if topic.announce_all and mention_token:
        return f"{mention_token} {item.link}"
    return item.link


class NotificationDispatcher:
    """Matches feed items to channels and sends each item at most once."""

    def __init__(
        self,
        registry: TopicRegistry,
        ledger: DeliveryLedger,
        notifier: NotifierPort,
        delivery_config: DeliveryConfig,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._notifier = notifier
        self._delivery = delivery_config

    async def handle(self, item: FeedItem) -> bool:
        """Deliver one item; returns True when a message was sent.

        Exceptions from the notifier propagate and leave the ledger untouched,
        so a later callback carrying the same item can still deliver it.
        """

        topic = self._registry.find_by_feed_url(item.source_feed_url)
        if topic is None:
            LOGGER.debug("No channel subscribed to %s, dropping %s", item.source_feed_url, item.guid)
            return False

        if item.guid in self._ledger:
            LOGGER.info("Dedup skip for %s in channel %s", item.guid, topic.channel_id)
            return False

        body = format_message(item, topic, self._delivery.mention_token)
        await self._notifier.send(topic.channel_id, body)
        # Recorded only after the send returned.
        self._ledger.record(item.guid)
        LOGGER.info("Delivered %s to channel %s", item.guid, topic.channel_id)
        return True
