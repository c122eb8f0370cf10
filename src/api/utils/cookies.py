"""
Session cookie issuance.

Turns a login/signup result into Set-Cookie headers:

    <name>=<token>; HttpOnly; Secure (production only); Max-Age=<seconds>; Path=/; SameSite=Lax

plus ``is_admin=1`` with the same attributes for the administrator identity.
"""

from typing import Optional

from fastapi import Request, Response

from src.app.use_cases.auth.dtos import AuthResponse

ADMIN_COOKIE_NAME = "is_admin"


class SessionCookieIssuer:
    def __init__(self, cookie_name: str = "session", secure: bool = False):
        self.cookie_name = cookie_name
        self.secure = secure

    def issue(self, response: Response, auth: AuthResponse) -> None:
        self._set(response, self.cookie_name, auth.session_token, auth.max_age)
        if auth.is_admin:
            self._set(response, ADMIN_COOKIE_NAME, "1", auth.max_age)

    def clear(self, response: Response) -> None:
        for name in (self.cookie_name, ADMIN_COOKIE_NAME):
            response.delete_cookie(
                name, path="/", secure=self.secure, httponly=True, samesite="lax"
            )

    def read_token(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.cookie_name) or None

    def _set(self, response: Response, name: str, value: str, max_age: int) -> None:
        response.set_cookie(
            key=name,
            value=value,
            max_age=max_age,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )
