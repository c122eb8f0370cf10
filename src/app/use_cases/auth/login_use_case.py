"""
Login Use Case

Verifies email/password against the configured credential backends and
issues a session token.
"""

import logging

from src.libs.result import Result, Return
from src.app.security.tokens import generate_session_token
from src.app.services.credential_backends import CredentialBackends
from src.app.services.rate_limiter import IRateLimiter
from src.domain.base import normalize_email
from src.domain.exceptions import BackendUnavailableError, UnconfiguredError
from .dtos import AuthResponse, UserInfo
from .errors import BACKEND_UNAVAILABLE, INVALID_CREDENTIALS, UNCONFIGURED, rate_limited
from .settings import AuthSettings
from .validation import validate_credentials

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for user login and session issuance.

    Business Rules:
    - Input is validated before the rate limiter is touched
    - Rate limited per origin and email (login:{origin}:{email})
    - Primary is asked first; Fallback only if Primary is unavailable or
      does not know the email. A wrong password on Primary is final.
    - Unknown email and wrong password produce the same error
    - The session is stored on the backend that authenticated the user
    - The configured admin email gets an elevated session
    """

    def __init__(
        self,
        backends: CredentialBackends,
        rate_limiter: IRateLimiter,
        settings: AuthSettings,
    ):
        self.backends = backends
        self.rate_limiter = rate_limiter
        self.settings = settings

    async def execute(
        self, email: str, password: str, origin: str = "unknown"
    ) -> Result[AuthResponse]:
        """
        Execute login use case.

        Args:
            email: User email
            password: Plain text password
            origin: Caller identity used in the rate limit key (client IP)

        Returns:
            Result with AuthResponse containing the raw session token, or Error
        """
        validation = validate_credentials(email, password)
        if validation.is_err():
            return Return.err(validation.error)

        email = normalize_email(email)

        limit = await self.rate_limiter.check(
            f"login:{origin}:{email}",
            self.settings.login_rate_limit,
            self.settings.login_rate_window_ms,
        )
        if limit.limited:
            logger.warning(f"Login rate limited for origin={origin}")
            return Return.err(rate_limited(limit))

        try:
            outcome, store = await self.backends.authenticate(email, password)
            if not outcome.verified:
                return Return.err(INVALID_CREDENTIALS)

            user = outcome.user
            token = generate_session_token()
            await store.create_session(user.id, token, self.settings.session_max_age)
        except UnconfiguredError:
            logger.error("Login attempted with no credential backend configured")
            return Return.err(UNCONFIGURED)
        except BackendUnavailableError as e:
            logger.error(f"Login failed, no credential backend reachable: {e}")
            return Return.err(BACKEND_UNAVAILABLE)

        is_admin = self.settings.is_admin_email(user.email)
        logger.info(f"User {user.id} logged in via {store.name} backend")

        return Return.ok(
            AuthResponse(
                user=UserInfo.from_user(user),
                session_token=token,
                max_age=self.settings.session_max_age,
                is_admin=is_admin,
                backend=store.name,
            )
        )
