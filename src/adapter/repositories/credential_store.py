"""
SQLModel credential stores.

Both backends share the same tables and queries:

- PrimaryCredentialStore: hosted relational database reached over the
  network. Every call is bounded by a timeout; timeouts and driver/connection
  failures surface as BackendUnavailableError.
- EmbeddedCredentialStore: local SQLite file. Writes go through a single
  asyncio.Lock, reads run concurrently.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import delete, event, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.credential_store import AuthOutcome, ICredentialStore
from src.app.security.passwords import PasswordHasher
from src.app.security.tokens import TokenHasher
from src.domain.base import Clock, normalize_email, now_ms
from src.domain.entities import AuthOutcomeStatus, BackendName, Session, User
from src.domain.exceptions import BackendUnavailableError, DuplicateEmailError

logger = logging.getLogger(__name__)

Operation = Callable[[AsyncSession], Awaitable[Any]]

# Failures that mean the database cannot be reached right now. Anything else
# (bad data, constraint or schema errors) is a real error and propagates.
CONNECTIVITY_ERRORS = (OSError, OperationalError, InterfaceError, PoolTimeoutError)


class SqlModelCredentialStore(ICredentialStore):
    """Credential store implementation using SQLModel"""

    name = "store"

    def __init__(
        self,
        engine: AsyncEngine,
        hasher: PasswordHasher,
        token_hasher: TokenHasher,
        clock: Clock = now_ms,
    ):
        self.engine = engine
        self.hasher = hasher
        self.token_hasher = token_hasher
        self._clock = clock
        self._session_factory = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    async def init_schema(self) -> None:
        """Create the users and sessions tables if they do not exist"""
        async with self._schema_lock:
            if self._schema_ready:
                return
            async with self.engine.begin() as conn:
                await conn.run_sync(
                    SQLModel.metadata.create_all,
                    tables=[User.__table__, Session.__table__],
                )
            self._schema_ready = True

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def _execute(self, operation: Operation, write: bool = False) -> Any:
        if not self._schema_ready:
            await self.init_schema()
        async with self._session_factory() as session:
            return await operation(session)

    # Users

    async def create_user(self, name: Optional[str], email: str, password: str) -> User:
        """Create a new user"""
        email = normalize_email(email)
        password_hash = await self.hasher.hash(password)

        async def op(session: AsyncSession) -> User:
            user = User(email=email, password_hash=password_hash, name=name or None)
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise DuplicateEmailError(email)
            await session.refresh(user)
            return user

        return await self._execute(op, write=True)

    async def find_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        email = normalize_email(email)

        async def op(session: AsyncSession) -> Optional[User]:
            result = await session.exec(select(User).where(User.email == email))
            return result.first()

        return await self._execute(op)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""

        async def op(session: AsyncSession) -> Optional[User]:
            return await session.get(User, user_id)

        return await self._execute(op)

    async def authenticate(self, email: str, password: str) -> AuthOutcome:
        user = await self.find_user_by_email(email)
        if user is None:
            await self.hasher.burn(password)
            return AuthOutcome(AuthOutcomeStatus.not_found)
        if not await self.hasher.verify(password, user.password_hash):
            return AuthOutcome(AuthOutcomeStatus.invalid)
        return AuthOutcome(AuthOutcomeStatus.verified, user)

    async def verify_password(self, email: str, password: str) -> bool:
        outcome = await self.authenticate(email, password)
        return outcome.verified

    async def update_password(self, user_id: int, password: str) -> None:
        password_hash = await self.hasher.hash(password)

        async def op(session: AsyncSession) -> None:
            await session.execute(
                update(User).where(User.id == user_id).values(password_hash=password_hash)
            )
            await session.commit()

        await self._execute(op, write=True)

    # Sessions

    async def create_session(self, user_id: int, token: str, max_age_seconds: int) -> None:
        """Create a new session"""
        session_obj = Session(
            token=self.token_hasher.digest(token),
            user_id=user_id,
            expires_at=self._clock() + max_age_seconds * 1000,
        )

        async def op(session: AsyncSession) -> None:
            session.add(session_obj)
            await session.commit()

        await self._execute(op, write=True)

    async def find_session(self, token: str) -> Optional[Session]:
        """Get a live session; an expired one is deleted and reported absent"""
        digest = self.token_hasher.digest(token)

        async def read(session: AsyncSession) -> Optional[Session]:
            return await session.get(Session, digest)

        session_obj = await self._execute(read)
        if session_obj is None:
            return None
        if session_obj.is_expired(self._clock()):
            await self._delete_session_digest(digest)
            return None
        return session_obj

    async def delete_session(self, token: str) -> None:
        await self._delete_session_digest(self.token_hasher.digest(token))

    async def _delete_session_digest(self, digest: str) -> None:
        async def op(session: AsyncSession) -> None:
            await session.execute(delete(Session).where(Session.token == digest))
            await session.commit()

        await self._execute(op, write=True)

    async def delete_sessions_for_user(self, user_id: int) -> int:
        async def op(session: AsyncSession) -> int:
            result = await session.execute(delete(Session).where(Session.user_id == user_id))
            await session.commit()
            return result.rowcount

        return await self._execute(op, write=True)

    # Password reset

    async def set_reset_token(self, email: str, token: str, expiry_ms: int) -> None:
        email = normalize_email(email)
        digest = self.token_hasher.digest(token)

        async def op(session: AsyncSession) -> None:
            await session.execute(
                update(User)
                .where(User.email == email)
                .values(reset_token=digest, reset_expiry=expiry_ms)
            )
            await session.commit()

        await self._execute(op, write=True)

    async def consume_reset_token(self, token: str) -> Optional[str]:
        """
        Read and clear a live reset token.

        The clear is a conditional UPDATE on the token value, so when several
        callers race on the same token only the one whose UPDATE matches a
        row gets the email back.
        """
        digest = self.token_hasher.digest(token)
        now = self._clock()

        async def op(session: AsyncSession) -> Optional[str]:
            result = await session.exec(
                select(User).where(User.reset_token == digest, User.reset_expiry > now)
            )
            user = result.first()
            if user is None:
                return None

            cleared = await session.execute(
                update(User)
                .where(User.id == user.id, User.reset_token == digest)
                .values(reset_token=None, reset_expiry=None)
            )
            await session.commit()
            if cleared.rowcount != 1:
                return None
            return user.email

        return await self._execute(op, write=True)

    async def reset_password(self, token: str, password: str) -> Optional[User]:
        """
        Consume a live reset token and set the new password.

        Both happen in one conditional UPDATE, so a failed write leaves the
        token usable and a spent token never changes the password.
        """
        digest = self.token_hasher.digest(token)
        password_hash = await self.hasher.hash(password)
        now = self._clock()

        async def op(session: AsyncSession) -> Optional[User]:
            result = await session.exec(
                select(User).where(User.reset_token == digest, User.reset_expiry > now)
            )
            user = result.first()
            if user is None:
                return None

            updated = await session.execute(
                update(User)
                .where(User.id == user.id, User.reset_token == digest)
                .values(password_hash=password_hash, reset_token=None, reset_expiry=None)
            )
            await session.commit()
            if updated.rowcount != 1:
                return None
            await session.refresh(user)
            return user

        return await self._execute(op, write=True)


class PrimaryCredentialStore(SqlModelCredentialStore):
    """Network relational store; unreachable or slow means unavailable"""

    name = BackendName.primary.value

    def __init__(
        self,
        engine: AsyncEngine,
        hasher: PasswordHasher,
        token_hasher: TokenHasher,
        timeout_seconds: float = 3.0,
        clock: Clock = now_ms,
    ):
        super().__init__(engine, hasher, token_hasher, clock)
        self.timeout_seconds = timeout_seconds

    async def _execute(self, operation: Operation, write: bool = False) -> Any:
        try:
            return await asyncio.wait_for(
                super()._execute(operation, write), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            raise BackendUnavailableError(self.name, f"timed out after {self.timeout_seconds}s")
        except CONNECTIVITY_ERRORS as e:
            raise BackendUnavailableError(self.name, type(e).__name__) from e
        except DBAPIError as e:
            if not e.connection_invalidated:
                raise
            raise BackendUnavailableError(self.name, "connection invalidated") from e


class EmbeddedCredentialStore(SqlModelCredentialStore):
    """Local SQLite store; one writer at a time, concurrent readers"""

    name = BackendName.fallback.value

    def __init__(
        self,
        engine: AsyncEngine,
        hasher: PasswordHasher,
        token_hasher: TokenHasher,
        clock: Clock = now_ms,
    ):
        super().__init__(engine, hasher, token_hasher, clock)
        self._write_lock = asyncio.Lock()
        _enable_sqlite_foreign_keys(engine)

    async def _execute(self, operation: Operation, write: bool = False) -> Any:
        try:
            if write:
                async with self._write_lock:
                    return await super()._execute(operation, write)
            return await super()._execute(operation, write)
        except CONNECTIVITY_ERRORS as e:
            raise BackendUnavailableError(self.name, type(e).__name__) from e
        except DBAPIError as e:
            if not e.connection_invalidated:
                raise
            raise BackendUnavailableError(self.name, "connection invalidated") from e


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
