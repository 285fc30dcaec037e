"""WebSub hub adapter.

Implements the core HubPort with a single form-encoded POST per request.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from core.config import HubConfig
from core.errors import SubscriptionError
from core.models import SubscriptionMode

LOGGER = logging.getLogger(__name__)


class HttpHubClient:
    """Sends subscribe/unsubscribe requests to the configured hub.

    The hub verifies intent asynchronously, so a 2xx here only means the
    request was accepted. Nothing is retried.
    """

    def __init__(self, config: HubConfig, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def subscribe(self, feed_url: str, mode: SubscriptionMode) -> None:
        form = {
            "hub.callback": self._config.callback_url,
            "hub.topic": feed_url,
            "hub.verify": "async",
            "hub.mode": mode.value,
        }
        LOGGER.debug("Sending hub %s for %s", mode.value, feed_url)
        try:
            response = await self._client.post(
                self._config.hub_url,
                data=form,
                timeout=self._config.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise SubscriptionError(feed_url, mode.value, "hub request timed out") from exc
        except httpx.HTTPError as exc:
            raise SubscriptionError(feed_url, mode.value, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            body = response.text[:200]
            raise SubscriptionError(feed_url, mode.value, f"hub returned {response.status_code}: {body}")
        LOGGER.debug("Hub accepted %s for %s (%s)", mode.value, feed_url, response.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()
