"""
In-memory TTL cache for geocoding query results.

Entries are keyed by a canonical hash of the query parameters and expire
lazily: an expired entry is dropped the next time it is read. There is no
background sweeper, so idle keys stay resident until they are overwritten,
evicted by the optional ``max_entries`` bound, or the process restarts.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from core.constants import DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


def _canonical_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def make_cache_key(prefix: str, params: dict[str, Any]) -> str:
    """
    Produce a deterministic cache key from query parameters.

    Text is trimmed and lower-cased, ``None`` values are dropped and
    parameter names are sorted, so logically identical queries collapse to
    one key regardless of how the client formatted them.
    """
    canonical = {
        name.strip().lower(): _canonical_value(value)
        for name, value in params.items()
        if value is not None
    }
    raw = json.dumps(canonical, sort_keys=True, default=str)
    digest = hashlib.sha256(raw.encode()).hexdigest()[:16]
    return f"cache:{prefix}:{digest}"


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float


class TTLCache:
    """
    Key/value store with per-entry time-to-live.

    Parameters
    ----------
    default_ttl : float
        TTL in seconds used when ``set`` is called without one.
    max_entries : int | None
        Optional bound; the least recently used entry is evicted when
        exceeded. ``None`` keeps the cache unbounded.
    clock : callable
        Monotonic time source in seconds. Tests inject a fake clock.
    """

    def __init__(
        self,
        *,
        default_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl_seconds = self.default_ttl if ttl is None else ttl
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            expires_at=self._clock() + ttl_seconds,
        )
        if self.max_entries is not None and len(self._entries) > self.max_entries:
            oldest, _ = self._entries.popitem(last=False)
            logger.debug("Cache full, evicted %s", oldest)

    def clear(self) -> None:
        self._entries.clear()
