"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
"""

from typing import Optional
from pydantic import BaseModel

from src.domain.entities import User


class UserInfo(BaseModel):
    """Public user fields returned to clients"""

    id: int
    email: str
    name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(id=user.id, email=user.email, name=user.name)


class SignupCommand(BaseModel):
    """Signup command - validated signup intent"""

    email: str
    password: str
    name: Optional[str] = None
    origin: str = "unknown"


class AuthResponse(BaseModel):
    """
    Response for login and signup.

    session_token is the raw token for the cookie; it is never stored.
    """

    user: UserInfo
    session_token: str
    max_age: int
    is_admin: bool = False
    backend: str


class WhoAmIResponse(BaseModel):
    """Response for the current-session lookup; user is None when anonymous"""

    ok: bool
    user: Optional[UserInfo] = None


class MessageResponse(BaseModel):
    """Generic acknowledgement"""

    ok: bool = True
    message: str


class AdminExistsResponse(BaseModel):
    """Response for the admin-account existence check"""

    ok: bool = True
    configured: bool
    exists: bool
    backend: str
