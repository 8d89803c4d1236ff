"""
Fixed-window rate limiting for the location endpoints.

Each client gets its own window and one global window covers all clients
together. A request must fit in both to reach the location service, which
keeps total upstream provider spend bounded even when no single client is
abusive.

State is process-local. Running several instances multiplies the effective
limits by the instance count.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from core.constants import (
    DEFAULT_MAX_TRACKED_CLIENTS,
    DEFAULT_RATE_GLOBAL_MAX,
    DEFAULT_RATE_PER_CLIENT_MAX,
    DEFAULT_RATE_WINDOW_MS,
)
from core.exceptions import RateLimitException

logger = logging.getLogger(__name__)

CLIENT_SCOPE = "client"
GLOBAL_SCOPE = "global"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass
class RateWindow:
    window_start: float
    count: int
    max: int
    window_ms: int

    def expired(self, now: float) -> bool:
        return now - self.window_start >= self.window_ms

    def has_capacity(self) -> bool:
        return self.count < self.max

    def retry_after_ms(self, now: float) -> float:
        return max(0.0, self.window_start + self.window_ms - now)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    scope: str | None = None
    retry_after_ms: float = 0.0

    @property
    def retry_after_seconds(self) -> int:
        return max(1, math.ceil(self.retry_after_ms / 1000))


class FixedWindowRateLimiter:
    """
    Per-client plus global fixed-window limiter.

    ``clock`` returns milliseconds; tests pass a fake to step through window
    boundaries without sleeping.
    """

    def __init__(
        self,
        *,
        window_ms: int = DEFAULT_RATE_WINDOW_MS,
        per_client_max: int = DEFAULT_RATE_PER_CLIENT_MAX,
        global_max: int = DEFAULT_RATE_GLOBAL_MAX,
        max_tracked_clients: int = DEFAULT_MAX_TRACKED_CLIENTS,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        self.window_ms = window_ms
        self.per_client_max = per_client_max
        self.global_max = global_max
        self.max_tracked_clients = max_tracked_clients
        self._clock = clock
        self._clients: dict[str, RateWindow] = {}
        self._global: RateWindow | None = None

    @property
    def tracked_clients(self) -> int:
        return len(self._clients)

    def _fresh(self, now: float, limit: int) -> RateWindow:
        return RateWindow(window_start=now, count=0, max=limit, window_ms=self.window_ms)

    def _current(self, window: RateWindow | None, now: float, limit: int) -> RateWindow:
        if window is None or window.expired(now):
            return self._fresh(now, limit)
        return window

    def check(self, client_id: str) -> RateLimitDecision:
        """Count one request from ``client_id``; rejected requests are not counted."""
        now = self._clock()
        client = self._current(self._clients.get(client_id), now, self.per_client_max)
        global_window = self._current(self._global, now, self.global_max)

        if not client.has_capacity():
            return RateLimitDecision(
                allowed=False,
                scope=CLIENT_SCOPE,
                retry_after_ms=client.retry_after_ms(now),
            )
        if not global_window.has_capacity():
            return RateLimitDecision(
                allowed=False,
                scope=GLOBAL_SCOPE,
                retry_after_ms=global_window.retry_after_ms(now),
            )

        client.count += 1
        global_window.count += 1
        self._clients[client_id] = client
        self._global = global_window
        if len(self._clients) > self.max_tracked_clients:
            self._prune(now)
        return RateLimitDecision(allowed=True)

    def _prune(self, now: float) -> None:
        expired = [key for key, window in self._clients.items() if window.expired(now)]
        for key in expired:
            del self._clients[key]
        if expired:
            logger.debug("Pruned %d idle rate-limit windows", len(expired))

    def reset(self) -> None:
        self._clients.clear()
        self._global = None


def client_key(request: Request) -> str:
    """Client identifier: peer address, then first X-Forwarded-For hop."""
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    return first or "unknown"


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter


async def enforce_rate_limit(
    request: Request,
    limiter: Annotated[FixedWindowRateLimiter, Depends(get_rate_limiter)],
) -> None:
    """
    FastAPI dependency guarding the location endpoints.

    Raises ``RateLimitException`` (rendered as HTTP 429 by the app) before the
    endpoint body runs, so a rejected request never reaches a provider.
    """
    key = client_key(request)
    decision = limiter.check(key)
    if decision.allowed:
        return
    if decision.scope == GLOBAL_SCOPE:
        message = "Global geocoding capacity reached. Please try again shortly."
    else:
        message = "Rate limit exceeded for location lookups. Please slow down."
    logger.warning(
        "Rate limit (%s) hit for %s on %s", decision.scope, key, request.url.path
    )
    raise RateLimitException(
        message,
        {"scope": decision.scope, "retry_after": decision.retry_after_seconds},
    )
