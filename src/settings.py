"""Static configuration for hubrelay.

Non-secret settings (callback URL, channels, hub, logging) live in a single
JSON file; secrets come from the environment (see client.py).
"""

import json
import os

from core.config import DEFAULT_HUB_URL, DeliveryConfig, HubConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# HUBRELAY_CONFIG lets deployments keep config.json outside the checkout.
CONFIG_PATH = os.getenv("HUBRELAY_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))

DEFAULT_PORT = 3000


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _normalize_channels(raw_channels: list) -> list:
    """Keep @usernames as strings and turn numeric ids into ints."""

    channels = []
    for entry in raw_channels:
        value = str(entry).strip()
        if not value:
            continue
        if value.lstrip("-").isdigit():
            channels.append(int(value))
        else:
            channels.append(value)
    return channels


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Public URL the hub posts callbacks to; it must route to this process.
CALLBACK_URL = _CONFIG.get("callback_url")
if not CALLBACK_URL:
    raise RuntimeError("callback_url is required in config.json")

# Only these channels are watched for directives.
CHANNELS = _normalize_channels(_CONFIG.get("channels", []))
if not CHANNELS:
    raise RuntimeError("channels must list at least one channel in config.json")

PORT = int(_CONFIG.get("port", DEFAULT_PORT))

_hub = _CONFIG.get("hub", {})
HUB_CONFIG = HubConfig(
    callback_url=CALLBACK_URL,
    hub_url=_hub.get("url", DEFAULT_HUB_URL),
    timeout_seconds=float(_hub.get("timeout_seconds", 10)),
)

DELIVERY_CONFIG = DeliveryConfig(mention_token=_CONFIG.get("mention_token", "@everyone"))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
