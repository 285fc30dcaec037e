"""Deduplication helpers (core domain)."""

from __future__ import annotations


class DeliveryLedger:
    """Guids of feed items already delivered.

    Lives for the process lifetime and is never pruned.
    """

    def __init__(self) -> None:
        self._delivered: set[str] = set()

    def __contains__(self, guid: object) -> bool:
        return guid in self._delivered

    def __len__(self) -> int:
        return len(self._delivered)

    def record(self, guid: str) -> None:
        self._delivered.add(guid)
