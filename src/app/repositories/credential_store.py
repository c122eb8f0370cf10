from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from src.domain.entities import AuthOutcomeStatus, Session, User


@dataclass(frozen=True)
class AuthOutcome:
    """Result of checking credentials against one store"""

    status: AuthOutcomeStatus
    user: Optional[User] = None

    @property
    def verified(self) -> bool:
        return self.status == AuthOutcomeStatus.verified


class ICredentialStore(ABC):
    """
    Credential store interface - application layer

    Implementations raise BackendUnavailableError when the store cannot be
    reached and DuplicateEmailError when create_user hits an existing email.
    Emails are compared case-insensitively.
    """

    name: str

    async def init_schema(self) -> None:
        """Prepare tables; stores without a schema step do nothing"""
        pass

    async def dispose(self) -> None:
        """Release connections held by the store"""
        pass

    @abstractmethod
    async def create_user(self, name: Optional[str], email: str, password: str) -> User:
        """Hash the password and persist a new user"""
        pass

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def verify_password(self, email: str, password: str) -> bool:
        """False for unknown email or wrong password, at comparable cost"""
        pass

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> AuthOutcome:
        """Like verify_password, but tells a missing account apart from a wrong password"""
        pass

    @abstractmethod
    async def update_password(self, user_id: int, password: str) -> None:
        """Replace the user's password hash"""
        pass

    @abstractmethod
    async def create_session(self, user_id: int, token: str, max_age_seconds: int) -> None:
        """Persist a session for the raw token"""
        pass

    @abstractmethod
    async def find_session(self, token: str) -> Optional[Session]:
        """Get a live session by raw token, deleting it if expired"""
        pass

    @abstractmethod
    async def delete_session(self, token: str) -> None:
        """Delete a session by raw token"""
        pass

    @abstractmethod
    async def delete_sessions_for_user(self, user_id: int) -> int:
        """Delete all sessions of a user. Returns count of deleted sessions."""
        pass

    @abstractmethod
    async def set_reset_token(self, email: str, token: str, expiry_ms: int) -> None:
        """Store a password reset token and its absolute expiry"""
        pass

    @abstractmethod
    async def consume_reset_token(self, token: str) -> Optional[str]:
        """Atomically read and clear a live reset token. Returns the owner's email."""
        pass

    @abstractmethod
    async def reset_password(self, token: str, password: str) -> Optional[User]:
        """
        Consume a live reset token and set the new password in one transaction.

        Returns:
            The updated user, or None if the token is unknown, expired or
            already used (the password is then left unchanged)
        """
        pass
