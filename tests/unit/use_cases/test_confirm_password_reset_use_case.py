"""
Unit tests for ConfirmPasswordResetUseCase
"""

import pytest

from src.app.use_cases.auth.confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from src.domain.entities import User
from src.domain.exceptions import BackendUnavailableError


@pytest.mark.asyncio
async def test_successful_password_reset(backends, primary_store, fallback_store):
    primary_store.reset_password.return_value = None
    fallback_store.reset_password.return_value = User(id=4, email="user@example.com", password_hash="x")
    fallback_store.delete_sessions_for_user.return_value = 2

    result = await ConfirmPasswordResetUseCase(backends).execute("reset-token", "NewSecurePass1!")

    assert result.is_ok()
    fallback_store.reset_password.assert_called_once_with("reset-token", "NewSecurePass1!")
    fallback_store.delete_sessions_for_user.assert_called_once_with(4)
    primary_store.delete_sessions_for_user.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_or_used_token(backends, primary_store, fallback_store):
    primary_store.reset_password.return_value = None
    fallback_store.reset_password.return_value = None

    result = await ConfirmPasswordResetUseCase(backends).execute("reset-token", "NewSecurePass1!")

    assert result.error.code == "INVALID_TOKEN"
    primary_store.delete_sessions_for_user.assert_not_called()
    fallback_store.delete_sessions_for_user.assert_not_called()


@pytest.mark.asyncio
async def test_failed_password_write_is_not_reported_as_success(backends, primary_store, fallback_store):
    """The store keeps the token when the write fails, so the user can retry"""
    primary_store.reset_password.side_effect = BackendUnavailableError("primary", "timed out")
    fallback_store.reset_password.side_effect = BackendUnavailableError("fallback")

    result = await ConfirmPasswordResetUseCase(backends).execute("reset-token", "NewSecurePass1!")

    assert result.error.code == "BACKEND_UNAVAILABLE"


@pytest.mark.asyncio
async def test_session_revocation_failure_still_succeeds(backends, primary_store):
    primary_store.reset_password.return_value = User(id=4, email="user@example.com", password_hash="x")
    primary_store.delete_sessions_for_user.side_effect = BackendUnavailableError("primary")

    result = await ConfirmPasswordResetUseCase(backends).execute("reset-token", "NewSecurePass1!")

    assert result.is_ok()


@pytest.mark.asyncio
async def test_weak_password_does_not_consume_token(backends, primary_store):
    result = await ConfirmPasswordResetUseCase(backends).execute("reset-token", "short")

    assert result.error.code == "INVALID_INPUT"
    primary_store.reset_password.assert_not_called()


@pytest.mark.asyncio
async def test_missing_token(backends, primary_store):
    result = await ConfirmPasswordResetUseCase(backends).execute("", "NewSecurePass1!")

    assert result.error.code == "INVALID_INPUT"
    primary_store.reset_password.assert_not_called()
