"""
Opaque token generation and at-rest token hashing.
"""

import hashlib
import hmac
import logging
import secrets

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 24
SESSION_TOKEN_BYTES = 48

# Used only when no SESSION_TOKEN_SECRET is configured
_FALLBACK_KEY = b"credential-service:session-token:v1"


def generate_token(nbytes: int = RESET_TOKEN_BYTES) -> str:
    if nbytes < RESET_TOKEN_BYTES:
        raise ValueError(f"Tokens must be at least {RESET_TOKEN_BYTES} bytes")
    return secrets.token_hex(nbytes)


def generate_session_token() -> str:
    return generate_token(SESSION_TOKEN_BYTES)


class TokenHasher:
    """
    Keyed one-way transform applied to every token before it is persisted.

    The raw token goes to the client; only the HMAC-SHA256 digest is stored
    and used as the lookup key.
    """

    def __init__(self, secret: str = ""):
        if secret:
            self._key = secret.encode("utf-8")
        else:
            logger.warning(
                "SESSION_TOKEN_SECRET is not set; hashing tokens with the built-in key. "
                "Set SESSION_TOKEN_SECRET in production."
            )
            self._key = _FALLBACK_KEY

    def digest(self, token: str) -> str:
        return hmac.new(self._key, token.encode("utf-8"), hashlib.sha256).hexdigest()
