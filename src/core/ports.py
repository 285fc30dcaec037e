"""Ports (interfaces) used by the core relay.

Ports define the minimal contracts for the hub, feed parsing and chat
delivery adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from core.models import FeedItem, SubscriptionMode


class HubPort(Protocol):
    """Subscription requests against a WebSub hub."""

    async def subscribe(self, feed_url: str, mode: SubscriptionMode) -> None:
        """Raise SubscriptionError when the hub does not accept the request."""
        ...


class FeedParserPort(Protocol):
    """Turns a raw callback body into feed items."""

    def parse(self, payload: bytes, topic_hint: Optional[str] = None) -> Sequence[FeedItem]:
        """Raise FeedParseError when the payload is not a usable feed."""
        ...


class NotifierPort(Protocol):
    """Outbound chat messages."""

    async def send(self, channel_id: str, body: str) -> None:
        ...
