import logging
from typing import Optional

from src.libs.result import Result, Return
from src.app.services.credential_backends import CredentialBackends
from src.domain.exceptions import BackendUnavailableError, UnconfiguredError
from .dtos import UserInfo, WhoAmIResponse
from .errors import BACKEND_UNAVAILABLE, UNCONFIGURED

logger = logging.getLogger(__name__)

ANONYMOUS = WhoAmIResponse(ok=False, user=None)


class WhoAmIUseCase:
    """
    Use case for resolving the caller's session to a user.

    Business Rules:
    - Missing, unknown or expired session is an anonymous result, not an error
    - Expired sessions are deleted by the lookup
    - The user is read from the backend that holds the session
    - A session whose user no longer exists is anonymous
    """

    def __init__(self, backends: CredentialBackends):
        self.backends = backends

    async def execute(self, token: Optional[str]) -> Result[WhoAmIResponse]:
        if not token:
            return Return.ok(ANONYMOUS)

        try:
            session, store = await self.backends.first_match(
                lambda store: store.find_session(token)
            )
            if session is None:
                return Return.ok(ANONYMOUS)

            user = await store.get_user_by_id(session.user_id)
        except UnconfiguredError:
            logger.error("Session lookup with no credential backend configured")
            return Return.err(UNCONFIGURED)
        except BackendUnavailableError as e:
            logger.error(f"Session lookup failed, no credential backend reachable: {e}")
            return Return.err(BACKEND_UNAVAILABLE)

        if user is None:
            return Return.ok(ANONYMOUS)

        return Return.ok(WhoAmIResponse(ok=True, user=UserInfo.from_user(user)))
