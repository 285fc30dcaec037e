"""Telegram-to-core channel event mapping adapter.

This keeps Telethon-specific details out of the core relay. A channel's
"about" text is its topic.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from telethon import errors, utils
from telethon.tl.functions.channels import GetFullChannelRequest
from telethon.tl.types import PeerChannel

from core.models import ChannelEvent, ChannelEventKind

LOGGER = logging.getLogger(__name__)

ChannelRef = Union[str, int]

# Errors Telegram returns once a channel is deleted or the bot was removed.
_GONE_ERRORS = (
    errors.ChannelPrivateError,
    errors.ChannelInvalidError,
)


def channel_id_from_peer(raw_channel_id: int) -> str:
    """Return the marked (-100...) id used as the core channel key."""

    return str(utils.get_peer_id(PeerChannel(raw_channel_id)))


async def fetch_channel_event(
    client,
    channel_id: str,
    kind: ChannelEventKind = ChannelEventKind.UPDATED,
) -> Optional[ChannelEvent]:
    """Read a channel's current topic, mapping lost access to DELETED."""

    try:
        full = await client(GetFullChannelRequest(channel=int(channel_id)))
    except _GONE_ERRORS:
        return ChannelEvent(kind=ChannelEventKind.DELETED, channel_id=channel_id)
    except ValueError:
        # Telethon has no access hash cached for this channel yet.
        LOGGER.warning("Cannot resolve channel %s, ignoring update", channel_id)
        return None

    about = getattr(full.full_chat, "about", None) or None
    return ChannelEvent(kind=kind, channel_id=channel_id, topic_text=about)


async def resolve_channels(client, refs: Iterable[ChannelRef]) -> dict[str, object]:
    """Resolve configured channel refs (@username or id) to entities by channel key."""

    resolved: dict[str, object] = {}
    for ref in refs:
        try:
            entity = await client.get_entity(ref)
        except Exception:
            LOGGER.exception("Failed to resolve configured channel %s", ref)
            continue
        resolved[str(utils.get_peer_id(entity))] = entity
    return resolved


async def startup_events(client, entities: dict[str, object]) -> list[ChannelEvent]:
    """Build READY events carrying the current topic of every configured channel."""

    events: list[ChannelEvent] = []
    for channel_id, entity in entities.items():
        try:
            full = await client(GetFullChannelRequest(channel=entity))
        except _GONE_ERRORS:
            LOGGER.warning("Configured channel %s is not accessible", channel_id)
            continue
        about = getattr(full.full_chat, "about", None) or None
        events.append(ChannelEvent(kind=ChannelEventKind.READY, channel_id=channel_id, topic_text=about))
    return events
