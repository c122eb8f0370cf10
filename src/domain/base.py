import time
from datetime import UTC, datetime
from typing import Callable

# Millisecond wall clock; stores and the rate limiter accept a replacement for tests
Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    return email.strip().lower()
