"""
Ping Transport

Sends single liveness events (run, complete, fail, ok, tick) for one
monitor to the ping ingestion endpoint.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from cronitor_client.config import ClientSettings, PingConfig, require_monitor_id
from cronitor_client.config import settings as default_settings
from cronitor_client.errors import TransportError

logger = structlog.get_logger(__name__)

ENDPOINTS = ("run", "complete", "fail", "ok", "tick")


def clean_params(
    message: str | None = None,
    count: int | None = None,
    error_count: int | None = None,
    env: str | None = None,
    duration: float | None = None,
    host: str | None = None,
    series: str | None = None,
    api_key: str | None = None,
) -> dict[str, Any]:
    """
    Build the query parameters for a ping.

    Keys are emitted in a fixed order and falsy values are dropped, so a
    zero count is not sent.
    """
    params = {
        "msg": message,
        "count": count,
        "error_count": error_count,
        "env": env,
        "duration": duration,
        "host": host,
        "series": series,
        "auth_key": api_key,
    }
    return {key: value for key, value in params.items() if value}


def build_url(base_url: str, endpoint: str, monitor_id: str, params: Mapping[str, Any]) -> str:
    """Assemble the ping URL for an endpoint, appending the query when present."""
    url = f"{base_url.rstrip('/')}/{monitor_id}/{endpoint}"
    if params:
        url += "?" + urlencode(params)
    return url


class Ping:
    """
    Ping client bound to a single monitor.

    Each endpoint method accepts either a message string or keyword
    parameters and issues exactly one GET request. Failures are raised as
    TransportError; nothing is retried.

    Usage:
        ping = Ping("d3x0c1", api_key="12345")
        ping.run()
        ping.complete(duration=12.5, host="worker-1")
        ping.fail("disk full")
    """

    def __init__(
        self,
        monitor_id: str | Mapping[str, Any] | PingConfig | None = None,
        api_key: str | None = None,
        settings: ClientSettings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the ping client.

        Args:
            monitor_id: Monitor code, or a mapping/config carrying monitor_id and api_key
            api_key: Auth key appended to every ping; overrides the config value
            settings: Client settings, defaults to the environment-driven settings
            client: Optional httpx.Client (for dependency injection in tests)
        """
        config = PingConfig.coerce(monitor_id)
        self._settings = settings or default_settings
        self.monitor_id = require_monitor_id(config.monitor_id)
        self.api_key = api_key or config.api_key
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self._settings.timeout_seconds)
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> Ping:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def url_for(self, endpoint: str, message: str | None = None, **params: Any) -> str:
        """Return the URL a ping to the given endpoint would request."""
        if endpoint not in ENDPOINTS:
            raise ValueError(f"Unknown ping endpoint '{endpoint}'. Must be one of: {', '.join(ENDPOINTS)}")
        query = clean_params(message=message, api_key=self.api_key, **params)
        return build_url(self._settings.ping_api_url, endpoint, self.monitor_id, query)

    def send(self, endpoint: str, message: str | None = None, **params: Any) -> httpx.Response:
        """
        Send a ping to the given endpoint.

        Args:
            endpoint: One of run, complete, fail, ok, tick
            message: Optional message sent as `msg`
            **params: count, error_count, env, duration, host, series

        Returns:
            The httpx response

        Raises:
            TransportError: On connection failure or a non-2xx response
        """
        url = self.url_for(endpoint, message, **params)

        try:
            response = self._get_client().get(url)
        except httpx.HTTPError as e:
            logger.debug("Ping request failed", monitor_id=self.monitor_id, endpoint=endpoint, error=str(e))
            raise TransportError(f"Ping '{endpoint}' failed: {e}") from e

        if response.is_error:
            raise TransportError(
                f"Ping '{endpoint}' returned status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        logger.debug("Ping sent", monitor_id=self.monitor_id, endpoint=endpoint)
        return response

    def run(self, message: str | None = None, **params: Any) -> httpx.Response:
        """Report that a job run has started."""
        return self.send("run", message, **params)

    def complete(self, message: str | None = None, **params: Any) -> httpx.Response:
        """Report that a job run completed successfully."""
        return self.send("complete", message, **params)

    def fail(self, message: str | None = None, **params: Any) -> httpx.Response:
        """Report that a job run failed."""
        return self.send("fail", message, **params)

    def ok(self, message: str | None = None, **params: Any) -> httpx.Response:
        """Reset the monitor to a passing state."""
        return self.send("ok", message, **params)

    def tick(self, message: str | None = None, **params: Any) -> httpx.Response:
        """Report one or more heartbeat units, typically with count and error_count."""
        return self.send("tick", message, **params)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(monitor_id={self.monitor_id!r})>"
