import logging
from typing import Optional

from src.libs.result import Result, Return
from src.app.services.credential_backends import CredentialBackends
from src.domain.exceptions import UnconfiguredError
from .dtos import MessageResponse
from .errors import UNCONFIGURED

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for ending a session.

    The token is deleted from every reachable backend since the caller does
    not know which one issued it. Logging out without a session succeeds.
    """

    def __init__(self, backends: CredentialBackends):
        self.backends = backends

    async def execute(self, token: Optional[str]) -> Result[MessageResponse]:
        if token:
            try:
                await self.backends.each_reachable(lambda store: store.delete_session(token))
            except UnconfiguredError:
                logger.error("Logout attempted with no credential backend configured")
                return Return.err(UNCONFIGURED)

        return Return.ok(MessageResponse(message="Logged out"))
