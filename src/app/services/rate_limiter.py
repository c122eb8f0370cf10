from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate limit check"""

    limited: bool
    remaining: int
    reset_in_ms: int


class IRateLimiter(ABC):
    """Rate limiter interface - application layer"""

    @abstractmethod
    async def check(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        """Count one attempt for key and report whether it is over the limit"""
        pass

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget all attempts for key"""
        pass
