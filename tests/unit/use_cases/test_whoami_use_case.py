import pytest

from src.app.services.credential_backends import CredentialBackends
from src.app.use_cases.auth.whoami_use_case import WhoAmIUseCase
from src.domain.entities import Session, User
from src.domain.exceptions import BackendUnavailableError


@pytest.mark.asyncio
async def test_no_token_is_anonymous(backends, primary_store):
    result = await WhoAmIUseCase(backends).execute(None)

    assert result.is_ok()
    assert result.value.ok is False
    assert result.value.user is None
    primary_store.find_session.assert_not_called()


@pytest.mark.asyncio
async def test_valid_session_returns_user(backends, primary_store, fallback_store):
    primary_store.find_session.return_value = None
    fallback_store.find_session.return_value = Session(token="digest", user_id=5, expires_at=0)
    fallback_store.get_user_by_id.return_value = User(id=5, email="user@example.com", password_hash="x")

    result = await WhoAmIUseCase(backends).execute("raw-token")

    assert result.value.ok is True
    assert result.value.user.id == 5
    assert result.value.user.email == "user@example.com"
    fallback_store.get_user_by_id.assert_called_once_with(5)
    primary_store.get_user_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_or_expired_session_is_anonymous(backends, primary_store, fallback_store):
    primary_store.find_session.return_value = None
    fallback_store.find_session.return_value = None

    result = await WhoAmIUseCase(backends).execute("raw-token")

    assert result.is_ok()
    assert result.value.ok is False


@pytest.mark.asyncio
async def test_session_for_vanished_user_is_anonymous(backends, primary_store):
    primary_store.find_session.return_value = Session(token="digest", user_id=5, expires_at=0)
    primary_store.get_user_by_id.return_value = None

    result = await WhoAmIUseCase(backends).execute("raw-token")

    assert result.value.ok is False
    assert result.value.user is None


@pytest.mark.asyncio
async def test_all_backends_down_is_server_error(primary_store):
    primary_store.find_session.side_effect = BackendUnavailableError("primary")

    result = await WhoAmIUseCase(CredentialBackends(primary=primary_store)).execute("raw-token")

    assert result.error.code == "BACKEND_UNAVAILABLE"
