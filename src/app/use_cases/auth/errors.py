"""
Error values shared by the authentication flows.

Login must answer an unknown email and a wrong password with the very same
error, so both go through INVALID_CREDENTIALS.
"""

import math
from dataclasses import dataclass

from src.app.services.rate_limiter import RateLimitResult
from src.libs.result import Error


@dataclass(frozen=True)
class RateLimitError(Error):
    """RATE_LIMITED error carrying the seconds until the window resets"""

    retry_after_seconds: int = 0


INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid email or password")
DUPLICATE_EMAIL = Error("DUPLICATE_EMAIL", "Email already registered")
INVALID_TOKEN = Error("INVALID_TOKEN", "Invalid or expired password reset token")
FORBIDDEN = Error("FORBIDDEN", "Forbidden")
UNCONFIGURED = Error("UNCONFIGURED", "No credential backend configured")
BACKEND_UNAVAILABLE = Error("BACKEND_UNAVAILABLE", "Credential backend unavailable")


def invalid_input(message: str) -> Error:
    return Error("INVALID_INPUT", message)


def rate_limited(result: RateLimitResult) -> RateLimitError:
    return RateLimitError(
        "RATE_LIMITED",
        "Too many attempts, try again later",
        retry_after_seconds=max(1, math.ceil(result.reset_in_ms / 1000)),
    )
