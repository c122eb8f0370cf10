from dataclasses import replace

import pytest

from src.app.services.credential_backends import CredentialBackends
from src.app.use_cases.admin.admin_exists_use_case import AdminExistsUseCase
from src.domain.entities import User
from src.domain.exceptions import BackendUnavailableError


@pytest.mark.asyncio
async def test_wrong_secret_is_forbidden(backends, primary_store, settings):
    result = await AdminExistsUseCase(backends, settings).execute("wrong")

    assert result.error.code == "FORBIDDEN"
    primary_store.find_user_by_email.assert_not_called()


@pytest.mark.asyncio
async def test_missing_secret_is_forbidden(backends, settings):
    result = await AdminExistsUseCase(backends, settings).execute(None)

    assert result.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_unset_secret_outside_development_is_forbidden(backends, settings):
    settings = replace(settings, admin_check_secret="")

    result = await AdminExistsUseCase(backends, settings).execute("anything")

    assert result.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_development_skips_secret(backends, primary_store, settings):
    settings = replace(settings, environment="development")
    primary_store.find_user_by_email.return_value = User(id=1, email="admin@example.com", password_hash="x")

    result = await AdminExistsUseCase(backends, settings).execute(None)

    assert result.is_ok()
    assert result.value.exists is True


@pytest.mark.asyncio
async def test_admin_found_on_primary(backends, primary_store, fallback_store, settings):
    primary_store.find_user_by_email.return_value = User(id=1, email="admin@example.com", password_hash="x")

    result = await AdminExistsUseCase(backends, settings).execute("setup-secret")

    assert result.value.model_dump() == {
        "ok": True,
        "configured": True,
        "exists": True,
        "backend": "primary",
    }
    fallback_store.find_user_by_email.assert_not_called()


@pytest.mark.asyncio
async def test_admin_found_on_fallback(backends, primary_store, fallback_store, settings):
    primary_store.find_user_by_email.side_effect = BackendUnavailableError("primary")
    fallback_store.find_user_by_email.return_value = User(id=1, email="admin@example.com", password_hash="x")

    result = await AdminExistsUseCase(backends, settings).execute("setup-secret")

    assert result.value.exists is True
    assert result.value.backend == "fallback"


@pytest.mark.asyncio
async def test_admin_missing(backends, primary_store, fallback_store, settings):
    primary_store.find_user_by_email.return_value = None
    fallback_store.find_user_by_email.return_value = None

    result = await AdminExistsUseCase(backends, settings).execute("setup-secret")

    assert result.value.configured is True
    assert result.value.exists is False
    assert result.value.backend == "none"


@pytest.mark.asyncio
async def test_admin_email_not_configured(backends, primary_store, settings):
    settings = replace(settings, admin_email="")

    result = await AdminExistsUseCase(backends, settings).execute("setup-secret")

    assert result.value.configured is False
    assert result.value.exists is False
    primary_store.find_user_by_email.assert_not_called()


@pytest.mark.asyncio
async def test_backend_errors_are_not_surfaced(settings):
    result = await AdminExistsUseCase(CredentialBackends(), settings).execute("setup-secret")

    assert result.is_ok()
    assert result.value.exists is False
