from typing import Optional

from fastapi import APIRouter, Depends, Header, status

from src.api.error import ClientError, ServerError
from src.app.services.credential_backends import CredentialBackends
from src.app.use_cases.admin import AdminExistsUseCase
from src.app.use_cases.auth import AdminExistsResponse, AuthSettings
from src.depends import get_auth_settings, get_backends

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/admin-exists",
    status_code=status.HTTP_200_OK,
    response_model=AdminExistsResponse,
)
async def admin_exists(
    x_admin_secret: Optional[str] = Header(None),
    backends: CredentialBackends = Depends(get_backends),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Admin Account Existence Check

    Used by setup tooling. Outside development the X-Admin-Secret header must
    match ADMIN_CHECK_SECRET.

    Raises:
        - 403 Forbidden: Missing or wrong secret
        - 500 Internal Server Error: Server error
    """
    use_case = AdminExistsUseCase(backends, settings)
    result = await use_case.execute(x_admin_secret)

    if result.is_err():
        error = result.error
        if error.code == "FORBIDDEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value
