"""Feed document adapter.

Turns a hub callback body into core FeedItems using feedparser.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Optional

import feedparser

from core.errors import FeedParseError
from core.models import FeedItem

LOGGER = logging.getLogger(__name__)


def self_link(feed: Any) -> Optional[str]:
    """Return the href of the feed's rel="self" link, if any."""

    for link in feed.get("links", []):
        if link.get("rel") == "self" and link.get("href"):
            return link["href"]
    return None


class FeedparserFeedParser:
    """FeedParserPort implementation backed by feedparser."""

    def parse(self, payload: bytes, topic_hint: Optional[str] = None) -> list[FeedItem]:
        if not payload:
            raise FeedParseError("Empty hub callback body")

        # A stream keeps feedparser from treating the body as a path or URL.
        parsed = feedparser.parse(io.BytesIO(payload))
        if parsed.bozo and not parsed.entries:
            reason = getattr(parsed, "bozo_exception", "unrecognized document")
            raise FeedParseError(f"Could not parse hub callback: {reason}")
        if parsed.bozo:
            LOGGER.warning("Feed parsing warning: %s", getattr(parsed, "bozo_exception", ""))

        # Deletion notices carry no entries.
        if not parsed.entries:
            return []

        # The document's own self link wins over the HTTP Link header.
        source_feed_url = self_link(parsed.feed) or topic_hint
        if not source_feed_url:
            raise FeedParseError("Hub callback does not name its feed")

        items: list[FeedItem] = []
        for entry in parsed.entries:
            guid = entry.get("id") or entry.get("guid")
            link = entry.get("link")
            if not guid or not link:
                LOGGER.warning("Skipping entry without id or link from %s", source_feed_url)
                continue
            items.append(FeedItem(guid=guid, link=link, source_feed_url=source_feed_url))
        return items
