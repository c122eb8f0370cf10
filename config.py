import os
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")


class Settings(BaseSettings):
    """
    Service settings.

    Values come from env.yaml beside this module; environment variables with
    the same name override it.
    """

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_FILE_PATH,
        yaml_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    API_PORT: int = 8000
    API_HOST: str = "0.0.0.0"
    CORS_ORIGINS: Annotated[List[str], NoDecode] = []
    CORS_ALLOW_CREDENTIALS: bool = True
    LOG_LEVEL: str = "INFO"
    # Anything but development/dev/local gets the production behaviour
    ENVIRONMENT: str = "production"

    # Peers allowed to set X-Forwarded-For / X-Real-IP
    TRUSTED_PROXIES: Annotated[List[str], NoDecode] = []

    # Primary (network) relational store
    PRIMARY_ENABLED: bool = False
    PRIMARY_DB_URI: str = ""
    PRIMARY_TIMEOUT_SECONDS: float = 3.0

    # Embedded fallback store; empty disables it
    SQLITE_DB_PATH: str = os.path.join(ROOT_PATH, "data", "auth.db")

    ADMIN_EMAIL: str = ""
    ADMIN_CHECK_SECRET: str = ""

    SESSION_COOKIE_NAME: str = "session"
    SESSION_MAX_AGE: int = 604800
    SESSION_TOKEN_SECRET: str = ""

    BCRYPT_ROUNDS: int = 12

    LOGIN_RATE_LIMIT: int = 8
    LOGIN_RATE_WINDOW_MS: int = 60 * 1000
    SIGNUP_RATE_LIMIT: int = 4
    SIGNUP_RATE_WINDOW_MS: int = 60 * 1000
    RATE_LIMIT_MAX_KEYS: int = 10000

    @field_validator("CORS_ORIGINS", "TRUSTED_PROXIES", mode="before")
    @classmethod
    def split_comma_separated(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        return (init_settings, env_settings, YamlConfigSettingsSource(settings_cls))


ApplicationConfig = Settings()
