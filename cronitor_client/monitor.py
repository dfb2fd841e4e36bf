"""
Monitor Transport

CRUD access to monitor definitions through the management API, plus
pause and unpause calls on the ping endpoint.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from cronitor_client.config import ClientSettings, require_monitor_id
from cronitor_client.config import settings as default_settings
from cronitor_client.errors import ConfigurationError, TransportError
from cronitor_client.models import MonitorDefinition, cron_monitor, heartbeat_monitor

logger = structlog.get_logger(__name__)


class Monitor:
    """
    Client for the monitor management API.

    Requests are authenticated with HTTP Basic auth using the API key as
    the username. The credential lives on this instance's HTTP client only.

    Usage:
        monitor = Monitor(api_key="1337hax0r")
        monitor.create_cron(name="Nightly backup", expression="0 0 * * *")
        monitor.pause(monitor.monitor_id, 2)
        monitor.delete()
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: ClientSettings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the monitor client.

        Args:
            api_key: Account API key; falls back to CRONITOR_API_KEY
            settings: Client settings, defaults to the environment-driven settings
            client: Optional httpx.Client (for dependency injection in tests)

        Raises:
            ConfigurationError: If no API key is available
        """
        self._settings = settings or default_settings
        self.api_key = api_key or self._settings.api_key
        if not self.api_key:
            raise ConfigurationError("You must provide an apiKey.")

        self.monitor_id: str | None = None
        self._auth = httpx.BasicAuth(self.api_key, "")
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._settings.timeout_seconds,
                headers={"Accept": "application/json"},
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> Monitor:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _url(self, monitor_id: str | None = None) -> str:
        base = self._settings.monitor_api_url.rstrip("/")
        return f"{base}/{monitor_id}" if monitor_id else base

    def _resolve_id(self, monitor_id: str | None) -> str:
        return require_monitor_id(monitor_id or self.monitor_id)

    def _request(self, method: str, url: str, *, with_auth: bool = True, **kwargs: Any) -> httpx.Response:
        """
        Issue a request and raise TransportError on failure.

        Raises:
            TransportError: On connection failure or a non-2xx response
        """
        if with_auth:
            kwargs["auth"] = self._auth

        try:
            response = self._get_client().request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Monitor API request failed", method=method, url=url, error=str(e))
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.is_error:
            body = _decode(response)
            logger.warning(
                "Monitor API returned an error",
                method=method,
                url=url,
                status=response.status_code,
            )
            raise TransportError(
                f"{method} {url} returned status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        return response

    def create(self, payload: dict[str, Any] | MonitorDefinition) -> dict[str, Any]:
        """
        Create a monitor.

        The returned monitor code is remembered as `monitor_id` so later
        calls may omit it.

        Args:
            payload: Raw monitor body or a MonitorDefinition

        Returns:
            The created monitor as returned by the API
        """
        if isinstance(payload, MonitorDefinition):
            payload = payload.to_payload()

        response = self._request("POST", self._url(), json=payload)
        data = _decode(response)
        if isinstance(data, dict) and data.get("code"):
            self.monitor_id = data["code"]
        logger.info("Monitor created", monitor_id=self.monitor_id, name=payload.get("name"))
        return data

    def create_cron(
        self,
        name: str | None = None,
        expression: str | None = None,
        notification_lists: Sequence[str] | None = None,
        grace_seconds: int | None = None,
    ) -> dict[str, Any]:
        """Validate and create a cron monitor."""
        definition = cron_monitor(
            name=name,
            expression=expression,
            notification_lists=notification_lists,
            grace_seconds=grace_seconds,
        )
        return self.create(definition)

    def create_heartbeat(
        self,
        name: str | None = None,
        every: Sequence[Any] | None = None,
        at: str | None = None,
        notification_lists: Sequence[str] | None = None,
        grace_seconds: int | None = None,
    ) -> dict[str, Any]:
        """Validate and create a heartbeat monitor."""
        definition = heartbeat_monitor(
            name=name,
            every=every,
            at=at,
            notification_lists=notification_lists,
            grace_seconds=grace_seconds,
        )
        return self.create(definition)

    def filter(self, **params: Any) -> Any:
        """List monitors, passing params (e.g. page) as query parameters."""
        response = self._request("GET", self._url(), params=params)
        return _decode(response)

    def get(self, monitor_id: str | None = None) -> Any:
        """Read a single monitor."""
        response = self._request("GET", self._url(self._resolve_id(monitor_id)))
        return _decode(response)

    def update(self, monitor_id: str | None, payload: dict[str, Any]) -> Any:
        """Replace fields of an existing monitor."""
        response = self._request("PUT", self._url(self._resolve_id(monitor_id)), json=payload)
        return _decode(response)

    def delete(self, monitor_id: str | None = None) -> None:
        """Delete a monitor."""
        monitor_id = self._resolve_id(monitor_id)
        self._request("DELETE", self._url(monitor_id))
        if monitor_id == self.monitor_id:
            self.monitor_id = None
        logger.info("Monitor deleted", monitor_id=monitor_id)

    def pause(self, monitor_id: str | None, hours: int) -> httpx.Response:
        """
        Pause alerting for a monitor.

        Args:
            monitor_id: Monitor code
            hours: Number of hours to pause for; 0 resumes alerting
        """
        monitor_id = self._resolve_id(monitor_id)
        url = f"{self._settings.ping_api_url.rstrip('/')}/{monitor_id}/pause/{hours}"
        response = self._request("GET", url, with_auth=False, params={"auth_key": self.api_key})
        logger.info("Monitor pause updated", monitor_id=monitor_id, hours=hours)
        return response

    def unpause(self, monitor_id: str | None = None) -> httpx.Response:
        """Resume alerting for a paused monitor."""
        return self.pause(monitor_id, 0)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(monitor_id={self.monitor_id!r})>"


def _decode(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to text for non-JSON responses."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
