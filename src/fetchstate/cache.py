"""In-memory response cache owned by a single FetchController.

Entries are keyed by the exact target string and live as long as the
controller that owns them. There is no eviction, expiry or invalidation.
"""

from __future__ import annotations

from typing import Generic, TypeVar

import structlog

log = structlog.get_logger()

T = TypeVar("T")


class ResponseCache(Generic[T]):
    """Unbounded ``target → payload`` map.

    Membership decides hits, so falsy payloads (``[]``, ``0``, ``None``)
    are served from the cache like any other.
    """

    def __init__(self) -> None:
        self._entries: dict[str, T] = {}

    def __contains__(self, target: object) -> bool:
        return target in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, target: str, default: T | None = None) -> T | None:
        return self._entries.get(target, default)

    def set(self, target: str, payload: T) -> None:
        replaced = target in self._entries
        self._entries[target] = payload
        log.debug("cache_store", target=target, replaced=replaced, size=len(self._entries))
