"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol


_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool = True) -> bool:
    """Read a boolean flag from the environment."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def _env_optional_flag(name: str) -> Optional[bool]:
    """Read a tri-state flag: unset means 'decide per request'."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip().lower() not in _FALSE_VALUES


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class SessionSettings:
    """Cookie and storage settings for the session identifier."""
    name: str = "sessionguard"
    lifetime: int = 0
    path: str = "/"
    domain: Optional[str] = None
    secure: Optional[bool] = None
    ttl: int = 1440
    store: str = "redis"


@dataclass
class RedisSettings:
    """Redis connection settings."""
    url: str = "redis://localhost:6379/0"
    password: Optional[str] = None


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str


class FeatureFlags(Protocol):
    """
    Protocol for the two process-wide session feature flags.

    Implementations are consulted on every evaluation, so a flag may be
    toggled at runtime without restarting the process.
    """

    def rotation_enabled(self) -> bool:
        """Whether identifier rotation and expiry checks are active."""
        ...

    def address_check_enabled(self) -> bool:
        """Whether the client address takes part in hijack detection."""
        ...


@dataclass
class StaticFeatureFlags:
    """Fixed flag values, mainly for tests and embedding."""
    rotation: bool = True
    address_check: bool = True

    def rotation_enabled(self) -> bool:
        return self.rotation

    def address_check_enabled(self) -> bool:
        return self.address_check


class EnvFeatureFlags:
    """Feature flags read from the environment on every call."""

    def rotation_enabled(self) -> bool:
        return _env_flag("SESSION_ROTATION", True)

    def address_check_enabled(self) -> bool:
        return _env_flag("SESSION_IP_CHECK", True)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_settings(self) -> SessionSettings:
        """Get session cookie/storage settings."""
        ...

    def get_redis_settings(self) -> RedisSettings:
        """Get Redis connection settings."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_feature_flags(self) -> FeatureFlags:
        """Get the live feature flags."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_settings(self) -> SessionSettings:
        """
        Get session settings from environment variables.

        Raises:
            ValueError: If SESSION_NAME is empty or an integer setting is malformed
        """
        name = os.getenv("SESSION_NAME", "sessionguard").strip()
        if not name:
            raise ValueError("SESSION_NAME must not be empty")

        return SessionSettings(
            name=name,
            lifetime=_env_int("SESSION_LIFETIME", 0),
            path=os.getenv("SESSION_PATH", "/"),
            domain=os.getenv("SESSION_DOMAIN") or None,
            secure=_env_optional_flag("SESSION_SECURE"),
            ttl=_env_int("SESSION_TTL", 1440),
            store=os.getenv("SESSION_STORE", "redis").lower(),
        )

    def get_redis_settings(self) -> RedisSettings:
        """Get Redis settings from environment variables."""
        return RedisSettings(
            url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            password=os.getenv("REDIS_PASSWORD") or None,
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_env_int("API_PORT", 8080),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("API_DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def get_feature_flags(self) -> FeatureFlags:
        """Flags are re-read from the environment on each evaluation."""
        return EnvFeatureFlags()
