# app/rate_limiter.py
"""
In-memory rate limiter for abuse prevention.

Uses a fixed-window counter:
- Each key (identity + action) gets a window of window_seconds
- The first hit opens the window, later hits count against points
- Once hits reach points the key is limited until the window resets

The limiter is a constructed instance owning its window map. The map can be
injected, so several app instances can share one counter store instead of
each enforcing its own quota.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, MutableMapping, Optional

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """How many hits a key may spend per window."""
    points: int
    window_seconds: float


DEFAULT_POLICY = RateLimitPolicy(points=20, window_seconds=60.0)
LOGIN_POLICY = RateLimitPolicy(points=5, window_seconds=60.0)
MEMORIAL_CREATE_POLICY = RateLimitPolicy(points=10, window_seconds=60.0)
PET_CREATE_POLICY = RateLimitPolicy(points=20, window_seconds=60.0)


@dataclass
class RateWindow:
    """Counter state for a single key."""
    hits: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    """
    Outcome of one consume() call.

    Attributes:
        limited: True if the request must be rejected
        remaining: Hits left in the current window
        reset_at: Epoch seconds when the window resets
    """
    limited: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        """Whole seconds until the window resets (at least 1)."""
        return max(1, math.ceil(self.reset_at - now))


@dataclass
class RateLimiter:
    """
    Fixed-window rate limiter.

    Attributes:
        clock: Callable returning current time in seconds (for testing)
        windows: Key -> window mapping; a process-local dict unless injected

    Stale keys are never evicted; the map grows with the number of
    distinct keys seen for the life of the process.
    """
    clock: Callable[[], float] = field(default=time.time)
    windows: Optional[MutableMapping[str, RateWindow]] = None
    _lock: Lock = field(default_factory=Lock)

    def __post_init__(self):
        if self.windows is None:
            self.windows = {}

    def consume(self, key: str, policy: RateLimitPolicy = DEFAULT_POLICY) -> RateLimitResult:
        """
        Spend one hit for key.

        Returns:
            RateLimitResult describing whether the hit was allowed
        """
        now = self.clock()

        with self._lock:
            current = self.windows.get(key)

            if current is None or current.reset_at <= now:
                window = RateWindow(hits=1, reset_at=now + policy.window_seconds)
                self.windows[key] = window
                return RateLimitResult(
                    limited=False,
                    remaining=policy.points - 1,
                    reset_at=window.reset_at,
                )

            if current.hits >= policy.points:
                _logger.warning(f"Rate limit exceeded for key={key}")
                return RateLimitResult(limited=True, remaining=0, reset_at=current.reset_at)

            current.hits += 1
            self.windows[key] = current
            return RateLimitResult(
                limited=False,
                remaining=policy.points - current.hits,
                reset_at=current.reset_at,
            )

    def reset(self) -> None:
        """Forget all windows (for testing)."""
        with self._lock:
            self.windows.clear()


def get_client_ip(request) -> str:
    """
    Best-effort client address, used only for rate-limit keys.

    Prefers the direct peer, then the first X-Forwarded-For hop,
    then "unknown".
    """
    if request.client and request.client.host:
        return request.client.host

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    return "unknown"
