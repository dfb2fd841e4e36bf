"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import MagicMock

import pytest

from cronitor_client.config import ClientSettings
from cronitor_client.ping import Ping
from tests.helpers import FakeScheduler, RecordingTransport


@pytest.fixture
def settings() -> ClientSettings:
    """Settings pinned to the public endpoints, independent of the environment."""
    return ClientSettings(
        api_key=None,
        ping_api_url="https://cronitor.link",
        monitor_api_url="https://cronitor.io/v3/monitors",
        timeout_seconds=5,
        heartbeat_interval_seconds=60,
    )


@pytest.fixture
def transport() -> RecordingTransport:
    """Transport answering 200 to every request."""
    return RecordingTransport()


@pytest.fixture
def scheduler() -> FakeScheduler:
    """Scheduler advanced manually by tests."""
    return FakeScheduler()


@pytest.fixture
def ping_mock() -> MagicMock:
    """Ping client double recording tick and fail calls."""
    return MagicMock(spec=Ping)
