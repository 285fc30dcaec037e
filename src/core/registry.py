"""In-memory table of active subscriptions, keyed by channel id."""

from __future__ import annotations

from typing import Iterator, Optional

from core.models import Topic


class TopicRegistry:
    """Holds at most one Topic per channel.

    Not synchronized: callers serialize access through the relay service's
    event loop.
    """

    def __init__(self) -> None:
        self._topics: dict[str, Topic] = {}

    def upsert(self, channel_id: str, feed_url: str, announce_all: bool) -> Topic:
        topic = Topic(feed_url=feed_url, channel_id=channel_id, announce_all=announce_all)
        self._topics[channel_id] = topic
        return topic

    def remove_by_channel_id(self, channel_id: str) -> Optional[Topic]:
        return self._topics.pop(channel_id, None)

    def get(self, channel_id: str) -> Optional[Topic]:
        return self._topics.get(channel_id)

    def find_by_feed_url(self, feed_url: str) -> Optional[Topic]:
        """Return the first topic subscribed to exactly this feed URL."""

        for topic in self._topics.values():
            if topic.feed_url == feed_url:
                return topic
        return None

    def __len__(self) -> int:
        return len(self._topics)

    def __iter__(self) -> Iterator[Topic]:
        return iter(list(self._topics.values()))
