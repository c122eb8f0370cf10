"""
Primary / Fallback backend selection.

Flows ask this object for stores instead of holding a single store, so the
fallback rule lives in one place:

- Primary is tried first when configured
- Fallback is tried only if Primary is unconfigured, unreachable
  (BackendUnavailableError) or does not hold the record
- Fallback is tried at most once per operation
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from src.app.repositories.credential_store import AuthOutcome, ICredentialStore
from src.app.security.passwords import PasswordHasher
from src.domain.entities import AuthOutcomeStatus
from src.domain.exceptions import BackendUnavailableError, UnconfiguredError

logger = logging.getLogger(__name__)

StoreOperation = Callable[[ICredentialStore], Awaitable[Any]]


class CredentialBackends:
    def __init__(
        self,
        primary: Optional[ICredentialStore] = None,
        fallback: Optional[ICredentialStore] = None,
        hasher: Optional[PasswordHasher] = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self.hasher = hasher

    @property
    def configured(self) -> bool:
        return self.primary is not None or self.fallback is not None

    def candidates(self) -> List[ICredentialStore]:
        """Configured stores in preference order"""
        if not self.configured:
            raise UnconfiguredError()
        return [s for s in (self.primary, self.fallback) if s is not None]

    async def first_match(
        self, operation: StoreOperation
    ) -> Tuple[Optional[Any], Optional[ICredentialStore]]:
        """
        Run operation against each store until one returns a non-None value.

        Returns:
            (value, store that produced it), or (None, None) when no reachable
            store had a match

        Raises:
            UnconfiguredError: no store configured
            BackendUnavailableError: every configured store was unreachable
        """
        last_error: Optional[BackendUnavailableError] = None
        reached_any = False

        for store in self.candidates():
            try:
                value = await operation(store)
            except BackendUnavailableError as e:
                logger.warning(f"Credential backend '{store.name}' unavailable: {e.reason or e}")
                last_error = e
                continue
            reached_any = True
            if value is not None:
                return value, store

        if not reached_any and last_error is not None:
            raise last_error
        return None, None

    async def each_reachable(self, operation: StoreOperation) -> List[Any]:
        """Run operation on every configured store, skipping unreachable ones"""
        results = []
        for store in self.candidates():
            try:
                results.append(await operation(store))
            except BackendUnavailableError as e:
                logger.warning(f"Credential backend '{store.name}' unavailable: {e.reason or e}")
        return results

    async def first_available(
        self, operation: StoreOperation
    ) -> Tuple[Any, ICredentialStore]:
        """
        Run operation on the first reachable store.

        Unlike first_match, a None result does not move on to the next store;
        only BackendUnavailableError does.
        """
        last_error: Optional[BackendUnavailableError] = None
        for store in self.candidates():
            try:
                return await operation(store), store
            except BackendUnavailableError as e:
                logger.warning(f"Credential backend '{store.name}' unavailable: {e.reason or e}")
                last_error = e
        raise last_error

    async def authenticate(
        self, email: str, password: str
    ) -> Tuple[AuthOutcome, Optional[ICredentialStore]]:
        """
        Check credentials with the Primary -> Fallback rule.

        A wrong password on Primary is final: retrying on Fallback would count
        the attempt twice and expose whether Primary knows the email.

        Returns:
            (outcome, store that decided it); store is None when no reachable
            store knows the email
        """
        last_error: Optional[BackendUnavailableError] = None
        reached_any = False

        stores = self.candidates()
        for index, store in enumerate(stores):
            try:
                outcome = await store.authenticate(email, password)
            except BackendUnavailableError as e:
                logger.warning(f"Credential backend '{store.name}' unavailable: {e.reason or e}")
                last_error = e
                continue
            reached_any = True
            if outcome.status != AuthOutcomeStatus.not_found:
                # Stores not consulted still cost one hash, so the answer takes
                # as long whichever store held the account
                await self._burn(password, len(stores) - index - 1)
                return outcome, store

        if not reached_any and last_error is not None:
            raise last_error
        return AuthOutcome(AuthOutcomeStatus.not_found), None

    async def _burn(self, password: str, times: int) -> None:
        if self.hasher is None:
            return
        for _ in range(times):
            await self.hasher.burn(password)
