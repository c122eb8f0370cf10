from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.api.utils.cookies import SessionCookieIssuer
from src.app.services.credential_backends import CredentialBackends
from src.app.services.rate_limiter import IRateLimiter
from src.app.use_cases.auth import (
    AuthSettings,
    ConfirmPasswordResetUseCase,
    LoginUseCase,
    LogoutUseCase,
    MessageResponse,
    RequestPasswordResetUseCase,
    SignupCommand,
    SignupUseCase,
    UserInfo,
    WhoAmIResponse,
    WhoAmIUseCase,
)
from src.app.use_cases.auth.errors import RateLimitError
from src.depends import (
    get_auth_settings,
    get_backends,
    get_cookie_issuer,
    get_origin,
    get_rate_limiter,
    get_session_token,
)
from src.libs.result import Error

router = APIRouter(prefix="/auth", tags=["Authentication"])

CLIENT_ERROR_STATUS = {
    "INVALID_INPUT": status.HTTP_400_BAD_REQUEST,
    "INVALID_TOKEN": status.HTTP_400_BAD_REQUEST,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "DUPLICATE_EMAIL": status.HTTP_409_CONFLICT,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
}


def raise_for_error(error: Error):
    """Map a use case error to the HTTP error the handlers render"""
    status_code = CLIENT_ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    headers = None
    if isinstance(error, RateLimitError):
        headers = {"Retry-After": str(error.retry_after_seconds)}
    raise ClientError(error, status_code=status_code, headers=headers)


class AuthUserResponse(BaseModel):
    """Body returned by login and signup; the token travels in the cookie"""

    ok: bool = True
    user: UserInfo


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Fields are optional here so that missing values reach the use case and
    are reported as INVALID_INPUT before rate limiting.
    """

    email: Optional[str] = Field(None, description="User email address")
    password: Optional[str] = Field(None, description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=AuthUserResponse)
async def login(
    request: LoginRequest,
    response: Response,
    origin: str = Depends(get_origin),
    backends: CredentialBackends = Depends(get_backends),
    rate_limiter: IRateLimiter = Depends(get_rate_limiter),
    settings: AuthSettings = Depends(get_auth_settings),
    cookies: SessionCookieIssuer = Depends(get_cookie_issuer),
):
    """
    User Login

    Verifies credentials and sets the session cookie (plus is_admin=1 for
    the configured administrator).

    Raises:
        - 400 Bad Request: Missing or malformed email/password
        - 401 Unauthorized: Invalid credentials (same for unknown email)
        - 429 Too Many Requests: Rate limited
        - 500 Internal Server Error: No credential backend available
    """
    use_case = LoginUseCase(backends, rate_limiter, settings)
    result = await use_case.execute(request.email, request.password, origin=origin)

    if result.is_err():
        raise_for_error(result.error)

    cookies.issue(response, result.value)
    return AuthUserResponse(user=result.value.user)


class SignupRequest(BaseModel):
    """Signup HTTP request payload"""

    name: Optional[str] = Field(None, max_length=255, description="Display name")
    email: Optional[str] = Field(None, description="User email address")
    password: Optional[str] = Field(None, description="User password (min 8 chars)")


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=AuthUserResponse)
async def signup(
    request: SignupRequest,
    response: Response,
    origin: str = Depends(get_origin),
    backends: CredentialBackends = Depends(get_backends),
    rate_limiter: IRateLimiter = Depends(get_rate_limiter),
    settings: AuthSettings = Depends(get_auth_settings),
    cookies: SessionCookieIssuer = Depends(get_cookie_issuer),
):
    """
    User Signup

    Creates the account and signs it in.

    Raises:
        - 400 Bad Request: Missing or malformed email/password
        - 409 Conflict: Email already registered
        - 429 Too Many Requests: Rate limited
        - 500 Internal Server Error: No credential backend available
    """
    if not request.email or not request.password:
        raise_for_error(Error("INVALID_INPUT", "Email and password required"))

    command = SignupCommand(
        email=request.email,
        password=request.password,
        name=request.name,
        origin=origin,
    )

    use_case = SignupUseCase(backends, rate_limiter, settings)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    cookies.issue(response, result.value)
    return AuthUserResponse(user=result.value.user)


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    backends: CredentialBackends = Depends(get_backends),
    cookies: SessionCookieIssuer = Depends(get_cookie_issuer),
):
    """Delete the current session and clear the session cookies"""
    use_case = LogoutUseCase(backends)
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)

    cookies.clear(response)
    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=WhoAmIResponse)
async def me(
    token: Optional[str] = Depends(get_session_token),
    backends: CredentialBackends = Depends(get_backends),
):
    """
    Current User

    Returns {ok: false, user: null} with 200 when not signed in.
    """
    use_case = WhoAmIUseCase(backends)
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ForgotPasswordRequest(BaseModel):
    """Forgot password HTTP request payload"""

    email: Optional[str] = Field(None, description="User email address")


@router.post("/forgot", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    backends: CredentialBackends = Depends(get_backends),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Request Password Reset

    Security:
        - No email enumeration (same response for valid/invalid emails)

    Raises:
        - 400 Bad Request: Malformed email
        - 500 Internal Server Error: No credential backend available
    """
    use_case = RequestPasswordResetUseCase(backends, settings)
    result = await use_case.execute(request.email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ResetPasswordRequest(BaseModel):
    """Confirm password reset HTTP request payload"""

    token: Optional[str] = Field(None, description="Password reset token")
    password: Optional[str] = Field(None, description="New password (min 8 chars)")


@router.post("/reset", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordRequest,
    backends: CredentialBackends = Depends(get_backends),
):
    """
    Confirm Password Reset

    Consumes the single-use token, sets the new password and revokes all
    sessions of the account.

    Raises:
        - 400 Bad Request: Weak password, or invalid/expired/used token
        - 500 Internal Server Error: No credential backend available
    """
    use_case = ConfirmPasswordResetUseCase(backends)
    result = await use_case.execute(request.token, request.password)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
