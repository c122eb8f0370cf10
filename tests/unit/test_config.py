import pytest
from pydantic import ValidationError
from pydantic_settings import SettingsConfigDict

from config import Settings
from src.depends import build_cookie_issuer


@pytest.fixture
def clean_env(monkeypatch):
    for key in ("ENVIRONMENT", "API_PORT", "PRIMARY_ENABLED", "CORS_ORIGINS", "TRUSTED_PROXIES"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def yaml_settings(path):
    class YamlSettings(Settings):
        model_config = SettingsConfigDict(yaml_file=str(path))

    return YamlSettings


def test_defaults_fail_closed(clean_env):
    settings = Settings()

    assert settings.ENVIRONMENT == "production"
    assert settings.TRUSTED_PROXIES == []
    assert build_cookie_issuer(settings).secure is True


def test_development_cookies_are_not_secure(clean_env):
    clean_env.setenv("ENVIRONMENT", "development")

    assert build_cookie_issuer(Settings()).secure is False


def test_environment_variables_are_typed(clean_env):
    clean_env.setenv("API_PORT", "9001")
    clean_env.setenv("PRIMARY_ENABLED", "true")
    clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings()

    assert settings.API_PORT == 9001
    assert settings.PRIMARY_ENABLED is True
    assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize("key, value", [("API_PORT", ""), ("PRIMARY_ENABLED", "enabled")])
def test_invalid_values_name_the_key(clean_env, key, value):
    clean_env.setenv(key, value)

    with pytest.raises(ValidationError) as exc_info:
        Settings()

    assert key in str(exc_info.value)


def test_yaml_file_is_read_and_env_wins(clean_env, tmp_path):
    config_file = tmp_path / "env.yaml"
    config_file.write_text(
        "API_PORT: 7000\n"
        "ENVIRONMENT: development\n"
        "TRUSTED_PROXIES:\n"
        "  - 10.0.0.1\n"
    )
    clean_env.setenv("API_PORT", "7100")

    settings = yaml_settings(config_file)()

    assert settings.API_PORT == 7100
    assert settings.ENVIRONMENT == "development"
    assert settings.TRUSTED_PROXIES == ["10.0.0.1"]
