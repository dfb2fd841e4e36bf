"""
Cronitor Client

Monitor management, job pings and heartbeat aggregation for the
Cronitor monitoring service.

Provides:
- Ping client for run/complete/fail/ok/tick events
- Monitor client for creating, reading, updating and pausing monitors
- Heartbeat aggregator that batches ticks into periodic pings
"""

__version__ = "0.1.0"

from cronitor_client.config import ClientSettings, HeartbeatConfig, PingConfig
from cronitor_client.errors import (
    ConfigurationError,
    CronitorError,
    MonitorValidationError,
    TransportError,
)
from cronitor_client.heartbeat import Heartbeat, HeartbeatState, HeartbeatStatus
from cronitor_client.models import MonitorDefinition, cron_monitor, heartbeat_monitor
from cronitor_client.monitor import Monitor
from cronitor_client.ping import Ping

__all__ = [
    "__version__",
    # Config
    "ClientSettings",
    "HeartbeatConfig",
    "PingConfig",
    # Errors
    "CronitorError",
    "ConfigurationError",
    "MonitorValidationError",
    "TransportError",
    # Transports
    "Ping",
    "Monitor",
    # Models
    "MonitorDefinition",
    "cron_monitor",
    "heartbeat_monitor",
    # Heartbeat
    "Heartbeat",
    "HeartbeatState",
    "HeartbeatStatus",
]
