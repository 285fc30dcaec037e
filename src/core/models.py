"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Directive:
    """Subscription request encoded in a channel's topic text."""

    feed_url: str
    announce_all: bool


@dataclass(frozen=True)
class Topic:
    """One channel's active subscription."""

    feed_url: str
    channel_id: str
    announce_all: bool


@dataclass(frozen=True)
class FeedItem:
    """One entry of a hub callback payload."""

    guid: str
    link: str
    source_feed_url: str


class SubscriptionMode(str, Enum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class ChannelEventKind(str, Enum):
    READY = "ready"
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChannelEvent:
    """Channel metadata change reported by the chat platform."""

    kind: ChannelEventKind
    channel_id: str
    topic_text: Optional[str] = None


@dataclass(frozen=True)
class FeedCallback:
    """Raw hub callback body, with the topic from the HTTP Link header if sent."""

    payload: bytes
    topic_hint: Optional[str] = None
