"""
Monitor Models

Definitions for cron and heartbeat monitors and the payloads sent to the
monitor management API.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from cronitor_client.errors import MonitorValidationError

TIME_UNITS = ("seconds", "minutes", "hours", "days", "weeks")
AT_PATTERN = re.compile(r"^(0[0-9]|1[0-9]|2[0-3]):[0-5][0-9]$")


class MonitorType(str, Enum):
    """Monitor types understood by the management API."""

    CRON = "cron"
    HEARTBEAT = "heartbeat_v2"


class RuleType(str, Enum):
    """Alerting rule types."""

    NOT_ON_SCHEDULE = "not_on_schedule"  # Cron expression missed
    RUN_PING_NOT_RECEIVED = "run_ping_not_received"  # No ping within every
    RUN_PING_NOT_RECEIVED_AT = "run_ping_not_received_at"  # No ping by HH:MM


class Rule(BaseModel):
    """A single alerting rule on a monitor."""

    rule_type: RuleType
    value: str | int
    time_unit: str | None = None
    grace_seconds: int | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize the rule; grace_seconds is always present, time_unit only when set."""
        payload: dict[str, Any] = {"rule_type": self.rule_type.value, "value": self.value}
        if self.time_unit is not None:
            payload["time_unit"] = self.time_unit
        payload["grace_seconds"] = self.grace_seconds
        return payload


class MonitorDefinition(BaseModel):
    """A monitor to be created through the management API."""

    type: MonitorType
    name: str
    rules: list[Rule] = Field(default_factory=list)
    notification_lists: list[str] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body for a create request."""
        payload: dict[str, Any] = {
            "type": self.type.value,
            "name": self.name,
            "rules": [rule.to_payload() for rule in self.rules],
        }
        if self.notification_lists:
            payload["notifications"] = {"templates": list(self.notification_lists)}
        return payload


def _check_name(name: str | None, example: str) -> str:
    if not name:
        raise MonitorValidationError(f"'name' is a required field e.g. {example}")
    return name


def _check_notification_lists(notification_lists: Any) -> list[str] | None:
    if notification_lists is None:
        return None
    if isinstance(notification_lists, str) or not isinstance(notification_lists, Sequence):
        raise MonitorValidationError("'notificationLists' must be an array e.g. ['site-emergency']")
    return list(notification_lists)


def cron_monitor(
    name: str | None = None,
    expression: str | None = None,
    notification_lists: Sequence[str] | None = None,
    grace_seconds: int | None = None,
) -> MonitorDefinition:
    """
    Build a cron monitor that alerts when a job misses its schedule.

    Args:
        name: Monitor name
        expression: Cron expression, e.g. '0 0 * * *'
        notification_lists: Notification list keys to alert
        grace_seconds: Grace period before alerting

    Raises:
        MonitorValidationError: If a required field is missing or malformed
    """
    if not expression:
        raise MonitorValidationError(
            "'expression' is a required field e.g. {expression: '0 0 * * *', name: 'Daily at 00:00'}"
        )
    name = _check_name(name, "{expression: '0 0 * * *', name: 'Daily at 00:00'}")
    lists = _check_notification_lists(notification_lists)

    return MonitorDefinition(
        type=MonitorType.CRON,
        name=name,
        rules=[
            Rule(
                rule_type=RuleType.NOT_ON_SCHEDULE,
                value=expression,
                grace_seconds=grace_seconds or None,
            )
        ],
        notification_lists=lists,
    )


def normalize_every(every: Any) -> tuple[int, str]:
    """
    Validate an `every` pair such as (5, 'minute') and pluralize its unit.

    Raises:
        MonitorValidationError: If the pair is malformed or the unit unknown
    """
    if isinstance(every, str) or not isinstance(every, Sequence) or len(every) != 2:
        raise MonitorValidationError("'every' must be an array e.g. {every: [60, 'seconds']}")

    value, unit = every
    if isinstance(value, bool) or not isinstance(value, int):
        raise MonitorValidationError("'every[0]' must be an integer")

    unit = str(unit)
    if not unit.endswith("s"):
        unit += "s"
    if unit not in TIME_UNITS:
        raise MonitorValidationError(
            "'every[1]' is an invalid time unit. Must be one of: " + ",".join(TIME_UNITS)
        )
    return value, unit


def heartbeat_monitor(
    name: str | None = None,
    every: Sequence[Any] | None = None,
    at: str | None = None,
    notification_lists: Sequence[str] | None = None,
    grace_seconds: int | None = None,
) -> MonitorDefinition:
    """
    Build a heartbeat monitor that alerts when pings stop arriving.

    At least one of `every` (interval pair) or `at` (daily HH:MM deadline)
    must be given; both produce one rule each.

    Raises:
        MonitorValidationError: If a required field is missing or malformed
    """
    if not every and not at:
        raise MonitorValidationError("missing required field 'every' or 'at'")

    normalized = normalize_every(every) if every else None

    if at and not AT_PATTERN.match(at):
        raise MonitorValidationError("invalid 'at' value. must use format 'HH:MM'")

    name = _check_name(name, "{name: 'Daily at 00:00'}")
    lists = _check_notification_lists(notification_lists)

    rules: list[Rule] = []
    if normalized:
        rules.append(
            Rule(
                rule_type=RuleType.RUN_PING_NOT_RECEIVED,
                value=normalized[0],
                time_unit=normalized[1],
                grace_seconds=grace_seconds or None,
            )
        )
    if at:
        rules.append(
            Rule(
                rule_type=RuleType.RUN_PING_NOT_RECEIVED_AT,
                value=at,
                grace_seconds=grace_seconds or None,
            )
        )

    return MonitorDefinition(
        type=MonitorType.HEARTBEAT,
        name=name,
        rules=rules,
        notification_lists=lists,
    )
