"""Application entry point for the hubrelay bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import uvicorn
from art import tprint
from dotenv import load_dotenv
from telethon import events
from telethon.tl.types import UpdateChannel

from adapters.feed_parser import FeedparserFeedParser
from adapters.hub_client import HttpHubClient
from adapters.telegram_mapper import (
    channel_id_from_peer,
    fetch_channel_event,
    resolve_channels,
    startup_events,
)
from adapters.telegram_notifier import TelegramChannelNotifier
from adapters.webhook import create_app
from client import build_client
from core.directive import parse_directive
from core.errors import TransportDisconnect
from core.models import ChannelEventKind
from core.service import RelayService

NAME = "HUBRELAY"
FONT = "tarty-1"

# Environment variables whose values never reach the logs.
SECRET_ENV_VARS = ("BOT_TOKEN", "API_HASH")


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    names = list(SECRET_ENV_VARS) + list(config.get("redact", {}).get("patterns", []))
    values = []
    for name in names:
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging(config: dict, project_root: str) -> None:
    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/hubrelay.log")
        if not os.path.isabs(path):
            path = os.path.join(project_root, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)
    # Telethon is chatty at INFO about reconnects and updates.
    logging.getLogger("telethon").setLevel(max(level, logging.WARNING))


async def _serve(client, bot_token: str, settings) -> None:
    """Run the relay until Telegram disconnects."""

    logger = logging.getLogger(__name__)

    await client.start(bot_token=bot_token)
    me = await client.get_me()
    logger.info("Logged in as @%s", me.username)

    hub = HttpHubClient(settings.HUB_CONFIG)
    service = RelayService(
        hub=hub,
        feed_parser=FeedparserFeedParser(),
        notifier=TelegramChannelNotifier(client),
        delivery_config=settings.DELIVERY_CONFIG,
    )

    entities = await resolve_channels(client, settings.CHANNELS)
    watched = set(entities)
    watched_usernames = {str(ref).lower() for ref in settings.CHANNELS if isinstance(ref, str)}
    logger.info("Watching %s of %s configured channels", len(watched), len(settings.CHANNELS))

    # Raw UpdateChannel covers about-text edits, and losing access on deletion.
    @client.on(events.Raw(UpdateChannel))
    async def on_channel_update(update) -> None:
        channel_id = channel_id_from_peer(update.channel_id)
        if channel_id not in watched:
            return
        try:
            event = await fetch_channel_event(client, channel_id)
        except Exception:
            logger.exception("Error while reading channel %s", channel_id)
            return
        if event is not None:
            service.submit(event)

    @client.on(events.ChatAction())
    async def on_chat_action(event) -> None:
        if not (event.user_added or event.user_joined) or me.id not in (event.user_ids or []):
            return
        chat = await event.get_chat()
        channel_id = str(event.chat_id)
        username = getattr(chat, "username", None)
        if channel_id not in watched and f"@{username}".lower() not in watched_usernames:
            return
        watched.add(channel_id)
        try:
            created = await fetch_channel_event(client, channel_id, ChannelEventKind.CREATED)
        except Exception:
            logger.exception("Error while reading channel %s", channel_id)
            return
        if created is not None:
            service.submit(created)

    for ready in await startup_events(client, entities):
        service.submit(ready)

    server = uvicorn.Server(
        uvicorn.Config(create_app(service), host="0.0.0.0", port=settings.PORT, log_config=None)
    )
    relay_task = asyncio.create_task(service.run())
    web_task = asyncio.create_task(server.serve())
    logger.info("Listening for hub callbacks on port %s", settings.PORT)

    try:
        await client.run_until_disconnected()
    finally:
        server.should_exit = True
        service.stop()
        await asyncio.gather(web_task, relay_task, return_exceptions=True)
        await hub.aclose()

    raise TransportDisconnect("Telegram connection lost")


def _run() -> None:
    import settings

    _print_banner()
    _configure_logging(settings.LOGGING or {}, settings.PROJECT_ROOT)
    logger = logging.getLogger(__name__)
    logger.info("Starting hubrelay")

    client, bot_token = build_client()
    # Disconnects are fatal; a supervisor is expected to restart the process.
    client.loop.run_until_complete(_serve(client, bot_token, settings))


def _check(topic_text: str) -> None:
    directive = parse_directive(topic_text)
    if directive is None:
        print("No directive found.")
        return
    print(f"feed_url: {directive.feed_url}")
    print(f"announce_all: {directive.announce_all}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="hubrelay")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the relay")
    check_parser = subparsers.add_parser(
        "check",
        help="Show the directive a channel description would produce.",
    )
    check_parser.add_argument("topic_text")

    args = parser.parse_args(argv)
    if args.command == "check":
        _check(args.topic_text)
        return
    _run()


if __name__ == "__main__":
    main()
