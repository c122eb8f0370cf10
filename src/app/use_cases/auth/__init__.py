"""
Authentication Use Cases

All authentication-related business logic.
"""

from .signup_use_case import SignupUseCase
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase
from .whoami_use_case import WhoAmIUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .settings import AuthSettings
from .dtos import (
    AdminExistsResponse,
    AuthResponse,
    MessageResponse,
    SignupCommand,
    UserInfo,
    WhoAmIResponse,
)

__all__ = [
    # Use Cases
    "SignupUseCase",
    "LoginUseCase",
    "LogoutUseCase",
    "WhoAmIUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    # Settings
    "AuthSettings",
    # DTOs - Commands
    "SignupCommand",
    # DTOs - Responses
    "AuthResponse",
    "WhoAmIResponse",
    "MessageResponse",
    "AdminExistsResponse",
    # DTOs - Nested Models
    "UserInfo",
]
