"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_HUB_URL = "https://pubsubhubbub.appspot.com/subscribe"


@dataclass(frozen=True)
class HubConfig:
    """Hub endpoint and the public callback URL it should deliver to."""

    callback_url: str
    hub_url: str = DEFAULT_HUB_URL
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class DeliveryConfig:
    """Message formatting settings consumed by the dispatcher."""

    mention_token: str = "@everyone"
