from __future__ import annotations

from taskhub.core.config import Settings


def test_environment_profiles_apply_defaults() -> None:
    dev = Settings(environment="development")
    assert dev.environment == "development"
    assert dev.log_level == "DEBUG"
    assert dev.reload is True

    test_profile = Settings(environment="test")
    assert test_profile.environment == "test"
    assert test_profile.log_level == "WARNING"
    assert test_profile.reload is False

    ci_profile = Settings(environment="ci")
    assert ci_profile.environment == "ci"
    assert ci_profile.log_level == "INFO"
    assert ci_profile.reload is False


def test_environment_aliases_are_normalised() -> None:
    assert Settings(environment="DEV").environment == "development"
    assert Settings(environment="testing").environment == "test"


def test_environment_profile_respects_explicit_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TASKHUB_LOG_LEVEL", "error")
    assert Settings(environment="test").log_level == "ERROR"

    monkeypatch.delenv("TASKHUB_LOG_LEVEL", raising=False)
    monkeypatch.setenv("TASKHUB_RELOAD", "true")
    assert Settings(environment="test").reload is True


def test_admin_bootstrap_and_token_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TASKHUB_ADMIN_EMAIL", "root@example.com")
    monkeypatch.setenv("TASKHUB_ACCESS_TOKEN_EXPIRE_MINUTES", "0")

    settings = Settings(environment="test")

    assert settings.admin_email == "root@example.com"
    assert settings.access_token_expire_minutes == 1
