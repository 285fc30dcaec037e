"""HTTP callback endpoint for the hub.

POST / accepts raw feed documents and only queues them; the hub only cares
that the body was received. GET / answers the hub's intent verification.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from core.models import FeedCallback, SubscriptionMode
from core.service import RelayService

LOGGER = logging.getLogger(__name__)

ACK_BODY = "Ok."


def topic_from_link_header(header: Optional[str]) -> Optional[str]:
    """Return the rel="self" URL from a WebSub Link header, if present.

    Example: ``<https://hub.example/>; rel="hub", <https://feed.example/>; rel="self"``
    """

    if not header:
        return None
    for part in header.split(","):
        url_part, _, params = part.partition(";")
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.lower() == "rel" and "self" in value.strip('"').split():
                return url_part.strip().strip("<>")
    return None


def create_app(service: RelayService) -> FastAPI:
    app = FastAPI(title="hubrelay", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/", response_class=PlainTextResponse)
    async def verify(request: Request):
        params = request.query_params
        mode = params.get("hub.mode")
        feed_url = params.get("hub.topic")
        challenge = params.get("hub.challenge")

        if mode == "denied":
            LOGGER.warning("Hub denied subscription to %s: %s", feed_url, params.get("hub.reason"))
            return PlainTextResponse(ACK_BODY)

        try:
            subscription_mode = SubscriptionMode(mode)
        except ValueError:
            return PlainTextResponse("Unknown hub.mode", status_code=400)
        if not feed_url or challenge is None:
            return PlainTextResponse("Missing hub.topic or hub.challenge", status_code=400)

        if not service.expects_verification(subscription_mode, feed_url):
            LOGGER.warning("Refusing unexpected %s verification for %s", mode, feed_url)
            return PlainTextResponse("Unknown topic", status_code=404)

        LOGGER.info(
            "Confirmed %s for %s (lease_seconds=%s)",
            mode,
            feed_url,
            params.get("hub.lease_seconds"),
        )
        return PlainTextResponse(challenge)

    @app.post("/", response_class=PlainTextResponse)
    async def callback(request: Request):
        payload = await request.body()
        service.submit(FeedCallback(payload=payload, topic_hint=topic_from_link_header(request.headers.get("link"))))
        LOGGER.debug("Queued hub callback (%s bytes)", len(payload))
        return PlainTextResponse(ACK_BODY)

    return app
