"""
Use Cases

- auth/: Authentication flows
- admin/: Setup and operator tooling
"""

from .auth import (
    ConfirmPasswordResetUseCase,
    LoginUseCase,
    LogoutUseCase,
    RequestPasswordResetUseCase,
    SignupUseCase,
    WhoAmIUseCase,
)
from .admin import AdminExistsUseCase

__all__ = [
    # Auth
    "SignupUseCase",
    "LoginUseCase",
    "LogoutUseCase",
    "WhoAmIUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    # Admin
    "AdminExistsUseCase",
]
