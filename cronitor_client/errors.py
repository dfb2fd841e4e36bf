"""
Client Errors

Exception hierarchy shared by the ping transport, the monitor transport
and the heartbeat aggregator.
"""

from __future__ import annotations

from typing import Any


class CronitorError(Exception):
    """Base class for all client errors."""

    pass


class ConfigurationError(CronitorError, ValueError):
    """Raised when a component is constructed without required settings."""

    pass


class MonitorValidationError(CronitorError, ValueError):
    """Raised when a monitor definition is missing or has malformed fields."""

    pass


class TransportError(CronitorError):
    """
    Raised when a network call fails or returns a non-2xx response.

    Attributes:
        status_code: HTTP status of the response, None for connection errors
        body: Decoded response body when one was received
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(status_code={self.status_code!r}, message={str(self)!r})>"
