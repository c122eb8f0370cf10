import logging

from src.libs.result import Result, Return
from src.app.security.tokens import generate_session_token
from src.app.services.credential_backends import CredentialBackends
from src.app.services.rate_limiter import IRateLimiter
from src.domain.base import normalize_email
from src.domain.exceptions import (
    BackendUnavailableError,
    DuplicateEmailError,
    UnconfiguredError,
)
from .dtos import AuthResponse, SignupCommand, UserInfo
from .errors import BACKEND_UNAVAILABLE, DUPLICATE_EMAIL, UNCONFIGURED, rate_limited
from .settings import AuthSettings
from .validation import validate_credentials

logger = logging.getLogger(__name__)


class SignupUseCase:
    """
    Signup Use Case

    Command/Response Pattern:
    - Input: SignupCommand
    - Output: Result[AuthResponse]

    Business Logic:
    1. Validate email and password
    2. Rate limit per origin and email (signup:{origin}:{email})
    3. Reject an email already held by any reachable backend
    4. Create the user on Primary, or Fallback when Primary is unavailable
    5. Create a session on the same backend so signup ends signed in
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

    async def execute(self, command: SignupCommand) -> Result[AuthResponse]:
        validation = validate_credentials(command.email, command.password)
        if validation.is_err():
            return Return.err(validation.error)

        email = normalize_email(command.email)
        name = (command.name or "").strip() or None

        limit = await self.rate_limiter.check(
            f"signup:{command.origin}:{email}",
            self.settings.signup_rate_limit,
            self.settings.signup_rate_window_ms,
        )
        if limit.limited:
            logger.warning(f"Signup rate limited for origin={command.origin}")
            return Return.err(rate_limited(limit))

        try:
            existing, _ = await self.backends.first_match(
                lambda store: store.find_user_by_email(email)
            )
            if existing is not None:
                return Return.err(DUPLICATE_EMAIL)

            user, store = await self.backends.first_available(
                lambda store: store.create_user(name, email, command.password)
            )

            token = generate_session_token()
            await store.create_session(user.id, token, self.settings.session_max_age)
        except DuplicateEmailError:
            # Lost a race with a concurrent signup for the same email
            return Return.err(DUPLICATE_EMAIL)
        except UnconfiguredError:
            logger.error("Signup attempted with no credential backend configured")
            return Return.err(UNCONFIGURED)
        except BackendUnavailableError as e:
            logger.error(f"Signup failed, no credential backend reachable: {e}")
            return Return.err(BACKEND_UNAVAILABLE)

        logger.info(f"User {user.id} signed up on {store.name} backend")

        return Return.ok(
            AuthResponse(
                user=UserInfo.from_user(user),
                session_token=token,
                max_age=self.settings.session_max_age,
                is_admin=self.settings.is_admin_email(user.email),
                backend=store.name,
            )
        )
