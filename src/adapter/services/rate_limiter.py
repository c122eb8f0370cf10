"""
In-memory fixed-window rate limiter.

State is per process: several instances behind a load balancer each count
separately. Swap in a shared-store implementation of IRateLimiter for
multi-instance deployments.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict

from src.app.services.rate_limiter import IRateLimiter, RateLimitResult
from src.domain.base import Clock, now_ms

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    count: int
    reset_at: int


class InMemoryRateLimiter(IRateLimiter):
    """
    Fixed-window counter keyed by an arbitrary string.

    Business Rules:
    - First touch (or first touch after the window ended) starts a new window
      with count=1; expired entries are replaced, never decayed
    - At count >= limit the call is limited and the count is not incremented
    - Check-and-increment is atomic across concurrent callers
    - At most max_keys entries are kept; expired entries go first, then the
      ones closest to their reset time
    """

    def __init__(self, max_keys: int = 10000, clock: Clock = now_ms):
        self.max_keys = max_keys
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    async def check(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is None or entry.reset_at <= now:
                if entry is None and len(self._entries) >= self.max_keys:
                    self._evict(now)
                self._entries[key] = _Entry(count=1, reset_at=now + window_ms)
                return RateLimitResult(
                    limited=False, remaining=max(limit - 1, 0), reset_in_ms=window_ms
                )

            if entry.count >= limit:
                return RateLimitResult(
                    limited=True, remaining=0, reset_in_ms=entry.reset_at - now
                )

            entry.count += 1
            return RateLimitResult(
                limited=False,
                remaining=limit - entry.count,
                reset_in_ms=entry.reset_at - now,
            )

    async def reset(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def _evict(self, now: int) -> None:
        expired = [k for k, e in self._entries.items() if e.reset_at <= now]
        for k in expired:
            del self._entries[k]

        overflow = len(self._entries) - self.max_keys + 1
        if overflow > 0:
            oldest = sorted(self._entries, key=lambda k: self._entries[k].reset_at)
            for k in oldest[:overflow]:
                del self._entries[k]
            logger.warning(f"Rate limiter full, evicted {overflow} active keys")
