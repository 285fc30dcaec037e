from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from adapters.hub_client import HttpHubClient
from core.config import HubConfig
from core.errors import SubscriptionError
from core.models import SubscriptionMode

FEED_URL = "https://www.youtube.com/xml/feeds/videos.xml?channel_id=ABC"
CONFIG = HubConfig(callback_url="https://relay.example.com/", hub_url="https://hub.example.com/subscribe")


def _client(handler) -> HttpHubClient:
    transport = httpx.MockTransport(handler)
    return HttpHubClient(CONFIG, client=httpx.AsyncClient(transport=transport))


def test_subscribe_posts_websub_form() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202)

    asyncio.run(_client(handler).subscribe(FEED_URL, SubscriptionMode.SUBSCRIBE))

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://hub.example.com/subscribe"
    form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
    assert form == {
        "hub.callback": "https://relay.example.com/",
        "hub.topic": FEED_URL,
        "hub.verify": "async",
        "hub.mode": "subscribe",
    }


def test_unsubscribe_mode_is_sent() -> None:
    modes: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        modes.append(parse_qs(request.content.decode())["hub.mode"][0])
        return httpx.Response(202)

    asyncio.run(_client(handler).subscribe(FEED_URL, SubscriptionMode.UNSUBSCRIBE))

    assert modes == ["unsubscribe"]


def test_rejected_request_raises_subscription_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="Invalid value for hub.topic")

    with pytest.raises(SubscriptionError) as excinfo:
        asyncio.run(_client(handler).subscribe(FEED_URL, SubscriptionMode.SUBSCRIBE))

    assert "400" in str(excinfo.value)
    assert excinfo.value.feed_url == FEED_URL


def test_network_failure_raises_subscription_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SubscriptionError):
        asyncio.run(_client(handler).subscribe(FEED_URL, SubscriptionMode.SUBSCRIBE))


def test_timeout_raises_subscription_error() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(SubscriptionError) as excinfo:
        asyncio.run(_client(handler).subscribe(FEED_URL, SubscriptionMode.SUBSCRIBE))

    assert "timed out" in str(excinfo.value)
    # No retry.
    assert calls == [1]
