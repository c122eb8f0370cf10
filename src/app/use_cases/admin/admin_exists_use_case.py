"""
Admin Exists Use Case

Lets setup tooling check whether the configured administrator account has
been created, and in which backend.
"""

import hmac
import logging
from typing import Optional

from src.libs.result import Result, Return
from src.app.services.credential_backends import CredentialBackends
from src.app.use_cases.auth.dtos import AdminExistsResponse
from src.app.use_cases.auth.errors import FORBIDDEN
from src.app.use_cases.auth.settings import AuthSettings
from src.domain.entities import BackendName
from src.domain.exceptions import BackendUnavailableError, UnconfiguredError

logger = logging.getLogger(__name__)


class AdminExistsUseCase:
    """
    Use case for the admin-account existence check.

    Business Rules:
    - Outside development the caller must present the shared secret;
      with no secret configured the check is refused
    - Primary is searched first, then Fallback
    - Only existence and backend are reported, never account data
    - Backend errors are logged and reported as "not found"
    """

    def __init__(self, backends: CredentialBackends, settings: AuthSettings):
        self.backends = backends
        self.settings = settings

    def _authorized(self, provided_secret: Optional[str]) -> bool:
        if self.settings.is_development:
            return True
        expected = self.settings.admin_check_secret
        if not expected or not provided_secret:
            return False
        return hmac.compare_digest(provided_secret.encode("utf-8"), expected.encode("utf-8"))

    async def execute(self, provided_secret: Optional[str] = None) -> Result[AdminExistsResponse]:
        if not self._authorized(provided_secret):
            logger.warning("Admin existence check refused: bad or missing secret")
            return Return.err(FORBIDDEN)

        admin_email = self.settings.admin_email
        if not admin_email:
            return Return.ok(
                AdminExistsResponse(configured=False, exists=False, backend=BackendName.none.value)
            )

        try:
            user, store = await self.backends.first_match(
                lambda store: store.find_user_by_email(admin_email)
            )
        except (UnconfiguredError, BackendUnavailableError) as e:
            logger.warning(f"Admin existence check could not reach a backend: {e}")
            user, store = None, None

        return Return.ok(
            AdminExistsResponse(
                configured=True,
                exists=user is not None,
                backend=store.name if user is not None else BackendName.none.value,
            )
        )
