"""Error kinds raised by the core and its adapters."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for hubrelay failures."""


class SubscriptionError(RelayError):
    """The hub rejected or never answered a subscribe/unsubscribe request."""

    def __init__(self, feed_url: str, mode: str, reason: str) -> None:
        super().__init__(f"Hub {mode} failed for {feed_url}: {reason}")
        self.feed_url = feed_url
        self.mode = mode
        self.reason = reason


class FeedParseError(RelayError):
    """An inbound hub callback could not be decoded into feed items."""


class TransportDisconnect(RelayError):
    """The chat platform connection was lost; the process should exit."""
