import pytest

from totp_auth import InvalidConfiguration
from totp_auth.config import Settings, get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults_match_legacy_parameters():
    config = Settings().totp_config()
    assert (config.hash_algorithm, config.step_seconds, config.digits, config.window) == ("sha1", 30, 6, 1)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TOTP_HASH_ALGORITHM", "SHA256")
    monkeypatch.setenv("TOTP_STEP_SECONDS", "60")
    monkeypatch.setenv("TOTP_DIGITS", "8")
    monkeypatch.setenv("TOTP_WINDOW", "2")
    monkeypatch.setenv("TOTP_ISSUER", "Example")

    settings = get_settings()
    config = settings.totp_config()
    assert settings.issuer == "Example"
    assert (config.hash_algorithm, config.step_seconds, config.digits, config.window) == ("sha256", 60, 8, 2)


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("TOTP_DIGITS", "8")
    assert get_settings() is first


@pytest.mark.parametrize(
    "name, value",
    [("TOTP_DIGITS", "4"), ("TOTP_STEP_SECONDS", "0"), ("TOTP_HASH_ALGORITHM", "md5")],
)
def test_invalid_environment_raises(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(InvalidConfiguration):
        get_settings().totp_config()
