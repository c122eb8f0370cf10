"""
Request Password Reset Use Case

Generates and stores a single-use password reset token.
"""

import logging

from src.libs.result import Result, Return
from src.app.security.tokens import RESET_TOKEN_BYTES, generate_token
from src.app.services.credential_backends import CredentialBackends
from src.domain.base import Clock, normalize_email, now_ms
from src.domain.exceptions import BackendUnavailableError, UnconfiguredError
from .dtos import MessageResponse
from .errors import BACKEND_UNAVAILABLE, UNCONFIGURED
from .settings import AuthSettings
from .validation import validate_email

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If the email exists, a reset link will be sent"


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Malformed email is rejected
    - No email enumeration (same response for known and unknown emails)
    - Token is 24 random bytes, stored only as a keyed digest
    - Token expires in 1 hour
    - Delivering the token to the user is handled elsewhere
    """

    def __init__(
        self,
        backends: CredentialBackends,
        settings: AuthSettings,
        clock: Clock = now_ms,
    ):
        self.backends = backends
        self.settings = settings
        self._clock = clock

    async def execute(self, email: str) -> Result[MessageResponse]:
        """
        Execute request password reset use case.

        Args:
            email: User's email address

        Returns:
            Result with the generic acknowledgement, or Error

        Note:
            For security (no email enumeration), always returns success
            even if email doesn't exist. However, only generates token
            if email exists.
        """
        validation = validate_email(email)
        if validation.is_err():
            return Return.err(validation.error)

        email = normalize_email(email)
        response = MessageResponse(message=RESET_REQUESTED_MESSAGE)

        try:
            user, store = await self.backends.first_match(
                lambda store: store.find_user_by_email(email)
            )
            if user is None:
                return Return.ok(response)

            reset_token = generate_token(RESET_TOKEN_BYTES)
            expiry = self._clock() + self.settings.reset_token_ttl_ms
            await store.set_reset_token(user.email, reset_token, expiry)
        except UnconfiguredError:
            logger.error("Password reset requested with no credential backend configured")
            return Return.err(UNCONFIGURED)
        except BackendUnavailableError as e:
            logger.error(f"Password reset request failed, no credential backend reachable: {e}")
            return Return.err(BACKEND_UNAVAILABLE)

        logger.info(f"Password reset token issued for user {user.id} on {store.name} backend")
        logger.debug(f"Reset token for user {user.id}: {reset_token}")

        return Return.ok(response)
