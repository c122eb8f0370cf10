"""
Confirm Password Reset Use Case

Consumes a reset token and sets a new password.
"""

import logging

from src.libs.result import Result, Return
from src.app.services.credential_backends import CredentialBackends
from src.domain.exceptions import BackendUnavailableError, UnconfiguredError
from .dtos import MessageResponse
from .errors import BACKEND_UNAVAILABLE, INVALID_TOKEN, UNCONFIGURED, invalid_input
from .validation import validate_password

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - New password must meet the same rules as signup
    - Token is single-use: consuming it clears it, so a second attempt
      (or a concurrent one) gets INVALID_TOKEN
    - The token is cleared in the same write that sets the new password;
      if that write fails the token stays valid
    - Expired and unknown tokens are indistinguishable
    - All sessions of the user are revoked after the password changes
    """

    def __init__(self, backends: CredentialBackends):
        self.backends = backends

    async def execute(self, token: str, new_password: str) -> Result[MessageResponse]:
        """
        Execute confirm password reset use case.

        Args:
            token: Password reset token (plain text)
            new_password: New password to set

        Returns:
            Result with confirmation, or Error

        Errors:
            - INVALID_INPUT: Missing token or weak password
            - INVALID_TOKEN: Token unknown, expired or already used
        """
        if not token or not isinstance(token, str):
            return Return.err(invalid_input("Token required"))

        password_validation = validate_password(new_password)
        if password_validation.is_err():
            return Return.err(password_validation.error)

        try:
            user, store = await self.backends.first_match(
                lambda store: store.reset_password(token, new_password)
            )
            if user is None:
                return Return.err(INVALID_TOKEN)

            try:
                revoked_count = await store.delete_sessions_for_user(user.id)
            except BackendUnavailableError as e:
                # The password already changed; report success and leave the
                # sessions to expire
                logger.error(f"Could not revoke sessions of user {user.id} after reset: {e}")
                revoked_count = 0
        except UnconfiguredError:
            logger.error("Password reset confirmed with no credential backend configured")
            return Return.err(UNCONFIGURED)
        except BackendUnavailableError as e:
            logger.error(f"Password reset failed, no credential backend reachable: {e}")
            return Return.err(BACKEND_UNAVAILABLE)

        logger.info(
            f"Password reset for user {user.id} on {store.name} backend, "
            f"{revoked_count} sessions revoked"
        )

        return Return.ok(MessageResponse(message="Password has been reset successfully"))
