"""
Credential Service Domain Enums
"""

from enum import Enum


class AuthOutcomeStatus(str, Enum):
    """Result of checking an email/password pair against one backend"""

    verified = "verified"
    invalid = "invalid"
    not_found = "not_found"


class BackendName(str, Enum):
    """Which credential store holds a record"""

    primary = "primary"
    fallback = "fallback"
    none = "none"
