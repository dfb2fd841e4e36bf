"""Client Configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

from cronitor_client.errors import ConfigurationError

DEFAULT_INTERVAL_SECONDS = 60
MIN_INTERVAL_SECONDS = 10


class ClientSettings(BaseSettings):
    """Settings shared by the ping and monitor transports."""

    # Auth
    api_key: str | None = None

    # Endpoints
    ping_api_url: str = "https://cronitor.link"
    monitor_api_url: str = "https://cronitor.io/v3/monitors"

    # HTTP
    timeout_seconds: float = 10.0

    # Heartbeat
    heartbeat_interval_seconds: int = DEFAULT_INTERVAL_SECONDS

    class Config:
        env_prefix = "CRONITOR_"


class PingConfig(BaseModel):
    """Options identifying the monitor a ping client reports to."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    monitor_id: str | None = Field(default=None, alias="monitorId")
    api_key: str | None = Field(default=None, alias="apiKey")

    @classmethod
    def coerce(cls, value: str | Mapping[str, Any] | PingConfig | None):
        """Build a config from a bare monitor id, a mapping or an existing config."""
        if isinstance(value, cls):
            return value
        if isinstance(value, PingConfig):
            return cls.model_validate(value.model_dump())
        if isinstance(value, str):
            return cls(monitor_id=value)
        if value is None:
            return cls()
        return cls.model_validate(dict(value))


class HeartbeatConfig(PingConfig):
    """Construction options recognized by a Heartbeat."""

    interval_seconds: int | None = Field(default=None, alias="intervalSeconds")


def effective_interval(requested: int | None, default: int = DEFAULT_INTERVAL_SECONDS) -> int:
    """
    Resolve the flush interval for a heartbeat.

    A missing or zero request falls back to the default; anything below
    MIN_INTERVAL_SECONDS is raised to the floor.
    """
    return max(requested or default, MIN_INTERVAL_SECONDS)


def require_monitor_id(monitor_id: str | None, message: str = "You must provide a monitorId.") -> str:
    """Return the monitor id or raise ConfigurationError when it is empty."""
    if not monitor_id:
        raise ConfigurationError(message)
    return monitor_id


settings = ClientSettings()
