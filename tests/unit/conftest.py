import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import create_async_engine

from src.adapter.repositories.credential_store import (
    EmbeddedCredentialStore,
    PrimaryCredentialStore,
)
from src.app.security.passwords import PasswordHasher
from src.app.security.tokens import TokenHasher
from src.app.services.credential_backends import CredentialBackends
from src.app.use_cases.auth.settings import AuthSettings
from tests.utils.clock import FakeClock


@pytest.fixture(scope="session")
def hasher():
    # Lowest bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_hasher():
    return TokenHasher("unit-test-secret")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return AuthSettings(
        session_max_age=3600,
        admin_email="admin@example.com",
        admin_check_secret="setup-secret",
        environment="production",
        login_rate_limit=3,
        login_rate_window_ms=60 * 1000,
        signup_rate_limit=2,
        signup_rate_window_ms=60 * 1000,
    )


def make_mock_store(name: str):
    """Mock credential store with every operation as an AsyncMock"""
    store = MagicMock()
    store.name = name
    for method in (
        "create_user",
        "find_user_by_email",
        "get_user_by_id",
        "verify_password",
        "authenticate",
        "update_password",
        "create_session",
        "find_session",
        "delete_session",
        "delete_sessions_for_user",
        "set_reset_token",
        "consume_reset_token",
        "reset_password",
    ):
        setattr(store, method, AsyncMock())
    return store


@pytest.fixture
def primary_store():
    return make_mock_store("primary")


@pytest.fixture
def fallback_store():
    return make_mock_store("fallback")


@pytest.fixture
def backends(primary_store, fallback_store, hasher):
    return CredentialBackends(primary=primary_store, fallback=fallback_store, hasher=hasher)


@pytest_asyncio.fixture
async def embedded_store(tmp_path, hasher, token_hasher, clock):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fallback.db'}")
    store = EmbeddedCredentialStore(engine, hasher, token_hasher, clock=clock)
    await store.init_schema()
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def primary_sql_store(tmp_path, hasher, token_hasher, clock):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'primary.db'}")
    store = PrimaryCredentialStore(engine, hasher, token_hasher, timeout_seconds=5, clock=clock)
    await store.init_schema()
    yield store
    await store.dispose()
