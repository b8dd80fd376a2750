"""
Tests for configuration and logging setup.
"""

import logging

import pytest

from sessionguard.config.provider import EnvConfigProvider, EnvFeatureFlags, StaticFeatureFlags
from sessionguard.logging_config import (
    HealthCheckFilter,
    SessionIdRedactionFilter,
    get_logging_config,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "SESSION_NAME",
        "SESSION_LIFETIME",
        "SESSION_PATH",
        "SESSION_DOMAIN",
        "SESSION_SECURE",
        "SESSION_TTL",
        "SESSION_STORE",
        "SESSION_ROTATION",
        "SESSION_IP_CHECK",
        "REDIS_URL",
        "REDIS_PASSWORD",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_session_settings_defaults(clean_env):
    settings = EnvConfigProvider().get_session_settings()

    assert settings.name == "sessionguard"
    assert settings.lifetime == 0
    assert settings.path == "/"
    assert settings.domain is None
    assert settings.secure is None
    assert settings.ttl == 1440
    assert settings.store == "redis"


def test_session_settings_from_env(clean_env):
    clean_env.setenv("SESSION_NAME", "shop")
    clean_env.setenv("SESSION_LIFETIME", "3600")
    clean_env.setenv("SESSION_DOMAIN", "example.org")
    clean_env.setenv("SESSION_SECURE", "false")
    clean_env.setenv("SESSION_STORE", "Memory")

    settings = EnvConfigProvider().get_session_settings()

    assert settings.name == "shop"
    assert settings.lifetime == 3600
    assert settings.domain == "example.org"
    assert settings.secure is False
    assert settings.store == "memory"


@pytest.mark.parametrize("value", ["", "   "])
def test_empty_session_name_is_rejected(clean_env, value):
    clean_env.setenv("SESSION_NAME", value)

    with pytest.raises(ValueError, match="SESSION_NAME"):
        EnvConfigProvider().get_session_settings()


def test_invalid_integer_names_variable(clean_env):
    clean_env.setenv("SESSION_TTL", "forever")

    with pytest.raises(ValueError, match="SESSION_TTL"):
        EnvConfigProvider().get_session_settings()


def test_redis_settings(clean_env):
    clean_env.setenv("REDIS_URL", "redis://cache:6379/3")
    clean_env.setenv("REDIS_PASSWORD", "secret")

    settings = EnvConfigProvider().get_redis_settings()

    assert settings.url == "redis://cache:6379/3"
    assert settings.password == "secret"


def test_feature_flags_default_to_enabled(clean_env):
    flags = EnvFeatureFlags()

    assert flags.rotation_enabled() is True
    assert flags.address_check_enabled() is True


@pytest.mark.parametrize("value", ["false", "FALSE", "0", "no", "off"])
def test_feature_flags_can_be_disabled(clean_env, value):
    clean_env.setenv("SESSION_ROTATION", value)
    clean_env.setenv("SESSION_IP_CHECK", value)
    flags = EnvFeatureFlags()

    assert flags.rotation_enabled() is False
    assert flags.address_check_enabled() is False


def test_feature_flags_are_read_on_every_call(clean_env):
    flags = EnvConfigProvider().get_feature_flags()

    clean_env.setenv("SESSION_ROTATION", "false")
    assert flags.rotation_enabled() is False
    clean_env.setenv("SESSION_ROTATION", "true")
    assert flags.rotation_enabled() is True


def test_static_flags():
    flags = StaticFeatureFlags(rotation=False)
    assert flags.rotation_enabled() is False
    assert flags.address_check_enabled() is True


def _record(name, msg, *args):
    return logging.LogRecord(name, logging.INFO, __file__, 1, msg, args, None)


def test_session_ids_are_redacted_in_logs():
    record = _record("uvicorn.access", "cookie: %s", "shop_Session=AbCdEfGhIjKlMnOp; theme=dark")

    assert SessionIdRedactionFilter().filter(record) is True
    assert record.getMessage() == "cookie: shop_Session=AbCdEf…; theme=dark"


def test_messages_without_ids_are_untouched():
    record = _record("sessionguard", "Rotated %d sessions", 3)

    SessionIdRedactionFilter().filter(record)

    assert record.getMessage() == "Rotated 3 sessions"


def test_health_check_access_logs_are_dropped():
    health = _record("uvicorn.access", '127.0.0.1 - "GET /health HTTP/1.1" 200')
    other = _record("uvicorn.access", '127.0.0.1 - "GET /session HTTP/1.1" 200')

    assert HealthCheckFilter().filter(health) is False
    assert HealthCheckFilter().filter(other) is True


def test_logging_config_level():
    config = get_logging_config("DEBUG")

    assert config["loggers"]["sessionguard"]["level"] == "DEBUG"
    assert "session_id_filter" in config["handlers"]["default"]["filters"]
