from __future__ import annotations

from fastapi.testclient import TestClient

from adapters.webhook import create_app, topic_from_link_header
from core.models import FeedCallback, SubscriptionMode

FEED_URL = "https://www.youtube.com/xml/feeds/videos.xml?channel_id=ABC"


class FakeService:
    def __init__(self, known: set[str] | None = None) -> None:
        self.submitted: list[FeedCallback] = []
        self.known = known or set()

    def submit(self, event: FeedCallback) -> None:
        self.submitted.append(event)

    def expects_verification(self, mode: SubscriptionMode, feed_url: str) -> bool:
        if mode is SubscriptionMode.SUBSCRIBE:
            return feed_url in self.known
        return feed_url not in self.known


def test_callback_is_acknowledged_and_queued() -> None:
    service = FakeService()
    client = TestClient(create_app(service))

    response = client.post(
        "/",
        content=b"<feed/>",
        headers={"Link": f'<https://pubsubhubbub.appspot.com>; rel="hub", <{FEED_URL}>; rel="self"'},
    )

    assert response.status_code == 200
    assert response.text == "Ok."
    assert service.submitted == [FeedCallback(payload=b"<feed/>", topic_hint=FEED_URL)]


def test_callback_with_garbage_is_still_acknowledged() -> None:
    service = FakeService()
    client = TestClient(create_app(service))

    response = client.post("/", content=b"\x00\x01 not xml")

    assert response.status_code == 200
    assert response.text == "Ok."
    assert service.submitted[0].topic_hint is None


def test_verification_echoes_challenge_for_known_topic() -> None:
    client = TestClient(create_app(FakeService(known={FEED_URL})))

    response = client.get(
        "/",
        params={
            "hub.mode": "subscribe",
            "hub.topic": FEED_URL,
            "hub.challenge": "abc123",
            "hub.lease_seconds": "432000",
        },
    )

    assert response.status_code == 200
    assert response.text == "abc123"


def test_verification_rejects_unknown_topic() -> None:
    client = TestClient(create_app(FakeService()))

    response = client.get(
        "/",
        params={"hub.mode": "subscribe", "hub.topic": FEED_URL, "hub.challenge": "abc123"},
    )

    assert response.status_code == 404


def test_verification_rejects_bad_mode() -> None:
    client = TestClient(create_app(FakeService()))

    response = client.get("/", params={"hub.mode": "publish", "hub.topic": FEED_URL, "hub.challenge": "x"})

    assert response.status_code == 400


def test_link_header_parsing() -> None:
    assert topic_from_link_header(None) is None
    assert topic_from_link_header('<https://hub.example/>; rel="hub"') is None
    assert topic_from_link_header(f"<{FEED_URL}>; rel=self") == FEED_URL
