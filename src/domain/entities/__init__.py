"""
Credential Service Domain Entities

Each entity in its own file.
"""

from .enums import AuthOutcomeStatus, BackendName
from .user import User
from .session import Session

__all__ = [
    # Enums
    "AuthOutcomeStatus",
    "BackendName",
    # Entities
    "User",
    "Session",
]
