"""Topic directive parsing.

A channel opts in by putting a YouTube feed URL in its topic text, optionally
followed by ``#true`` to announce new items to every member:

    https://www.youtube.com/xml/feeds/videos.xml?channel_id=UC123#true
"""

from __future__ import annotations

import re
from typing import Optional

from core.models import Directive

DIRECTIVE_SEPARATOR = "#"
ANNOUNCE_ALL_FLAG = "true"

FEED_URL_PATTERN = re.compile(
    r"https://www\.youtube\.com/xml/feeds/videos\.xml\?channel_id=[\w-]+"
)


def is_feed_url(candidate: str) -> bool:
    """Return True when the candidate is exactly a supported feed URL."""

    return FEED_URL_PATTERN.fullmatch(candidate) is not None


def _first_word(text: str) -> str:
    # The rest of a description (after a space or newline) is free text.
    words = text.split()
    return words[0] if words else ""


def parse_directive(topic_text: Optional[str]) -> Optional[Directive]:
    """Extract the feed URL and announce-all flag from a channel topic.

    Returns None for topics that carry no directive; most channels have none.
    """

    if not topic_text:
        return None

    parts = topic_text.split(DIRECTIVE_SEPARATOR)
    url = _first_word(parts[0])
    if not is_feed_url(url):
        return None

    flag = _first_word(parts[1]) if len(parts) > 1 else ""
    return Directive(feed_url=url, announce_all=flag == ANNOUNCE_ALL_FLAG)
