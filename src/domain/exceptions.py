class CredentialStoreError(Exception):
    """Base class for credential store failures"""


class DuplicateEmailError(CredentialStoreError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class BackendUnavailableError(CredentialStoreError):
    """The store could not be reached; callers may fall back to another store"""

    def __init__(self, backend: str, reason: str = ""):
        self.backend = backend
        self.reason = reason
        super().__init__(f"{backend} backend unavailable: {reason}" if reason else f"{backend} backend unavailable")


class UnconfiguredError(CredentialStoreError):
    """No credential store is configured at all"""

    def __init__(self):
        super().__init__("No credential backend configured")
