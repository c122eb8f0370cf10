import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from src.adapter.repositories.credential_store import (
    EmbeddedCredentialStore,
    PrimaryCredentialStore,
)
from src.app.security.passwords import PasswordHasher
from src.app.security.tokens import TokenHasher
from src.app.services.credential_backends import CredentialBackends
from tests.utils.app import TestConfig, build_client


@pytest.fixture(scope="session")
def hasher():
    return PasswordHasher(rounds=TestConfig.BCRYPT_ROUNDS)


@pytest.fixture
def token_hasher():
    return TokenHasher(TestConfig.SESSION_TOKEN_SECRET)


@pytest_asyncio.fixture
async def primary_store(tmp_path, hasher, token_hasher):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'primary.db'}")
    store = PrimaryCredentialStore(
        engine, hasher, token_hasher, timeout_seconds=TestConfig.PRIMARY_TIMEOUT_SECONDS
    )
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def unreachable_primary_store(tmp_path, hasher, token_hasher):
    # The parent directory does not exist, so every connection attempt fails
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'offline' / 'primary.db'}"
    )
    store = PrimaryCredentialStore(engine, hasher, token_hasher, timeout_seconds=2)
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def fallback_store(tmp_path, hasher, token_hasher):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fallback.db'}")
    store = EmbeddedCredentialStore(engine, hasher, token_hasher)
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def client(primary_store, fallback_store, hasher):
    backends = CredentialBackends(primary=primary_store, fallback=fallback_store, hasher=hasher)
    async with build_client(backends) as ac:
        yield ac


@pytest_asyncio.fixture
async def degraded_client(unreachable_primary_store, fallback_store, hasher):
    """Client whose Primary backend is down"""
    backends = CredentialBackends(
        primary=unreachable_primary_store, fallback=fallback_store, hasher=hasher
    )
    async with build_client(backends) as ac:
        yield ac


@pytest_asyncio.fixture
async def unconfigured_client():
    async with build_client(CredentialBackends()) as ac:
        yield ac
