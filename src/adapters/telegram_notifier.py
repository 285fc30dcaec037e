"""Telegram channel notification adapter.

Posts relayed feed items into the channel that subscribed to them.
"""

from __future__ import annotations


class TelegramChannelNotifier:
    """Notifier adapter that posts messages through the bot's Telethon client."""

    def __init__(self, client) -> None:
        self._client = client

    async def send(self, channel_id: str, body: str) -> None:
        """Send the message body to the channel, with a link preview."""

        await self._client.send_message(int(channel_id), body, link_preview=True)
