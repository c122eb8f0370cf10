from dataclasses import dataclass

DEVELOPMENT_ENVIRONMENTS = ("development", "dev", "local")


def is_development_environment(environment: str) -> bool:
    return (environment or "").strip().lower() in DEVELOPMENT_ENVIRONMENTS


@dataclass(frozen=True)
class AuthSettings:
    """Tunables shared by the authentication flows"""

    session_max_age: int = 604800
    admin_email: str = ""
    admin_check_secret: str = ""
    environment: str = "production"
    login_rate_limit: int = 8
    login_rate_window_ms: int = 60 * 1000
    signup_rate_limit: int = 4
    signup_rate_window_ms: int = 60 * 1000
    reset_token_ttl_ms: int = 60 * 60 * 1000

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        return cls(
            session_max_age=config.SESSION_MAX_AGE,
            admin_email=(config.ADMIN_EMAIL or "").strip(),
            admin_check_secret=config.ADMIN_CHECK_SECRET or "",
            environment=config.ENVIRONMENT,
            login_rate_limit=config.LOGIN_RATE_LIMIT,
            login_rate_window_ms=config.LOGIN_RATE_WINDOW_MS,
            signup_rate_limit=config.SIGNUP_RATE_LIMIT,
            signup_rate_window_ms=config.SIGNUP_RATE_WINDOW_MS,
        )

    def is_admin_email(self, email: str) -> bool:
        return bool(self.admin_email) and email.strip().lower() == self.admin_email.lower()

    @property
    def is_development(self) -> bool:
        return is_development_environment(self.environment)
