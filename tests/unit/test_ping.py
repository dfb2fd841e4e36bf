"""
Tests for the Ping transport.
"""

import httpx
import pytest

from cronitor_client.config import ClientSettings
from cronitor_client.errors import ConfigurationError, TransportError
from cronitor_client.ping import ENDPOINTS, Ping, build_url, clean_params

from tests.helpers import FAKE_ID, PING_API_KEY, RecordingTransport

VALID_PARAMS = {
    "count": 1,
    "error_count": 1,
    "env": "production",
    "duration": 100,
    "host": "10-0-0-223",
    "series": "world",
}


def _ping(transport: RecordingTransport, settings: ClientSettings, api_key: str | None = None) -> Ping:
    return Ping(FAKE_ID, api_key=api_key, settings=settings, client=httpx.Client(transport=transport))


class TestCleanParams:
    """Tests for query parameter assembly."""

    def test_drops_empty_values(self) -> None:
        """Test None and zero values are omitted."""
        assert clean_params(count=0, error_count=None, env="") == {}

    def test_fixed_order(self) -> None:
        """Test keys come out in the wire order."""
        params = clean_params(message="hello there", api_key=PING_API_KEY, **VALID_PARAMS)
        assert list(params) == [
            "msg",
            "count",
            "error_count",
            "env",
            "duration",
            "host",
            "series",
            "auth_key",
        ]

    def test_build_url_without_params(self) -> None:
        """Test no query string is appended when there are no params."""
        assert build_url("https://cronitor.link/", "run", FAKE_ID, {}) == f"https://cronitor.link/{FAKE_ID}/run"


class TestPing:
    """Tests for Ping endpoints."""

    def test_missing_monitor_id(self) -> None:
        """Test construction without a monitor id raises."""
        with pytest.raises(ConfigurationError, match="You must provide a monitorId."):
            Ping()

    def test_accepts_mapping(self, settings: ClientSettings) -> None:
        """Test construction from a mapping with monitorId and apiKey."""
        ping = Ping({"monitorId": FAKE_ID, "apiKey": PING_API_KEY}, settings=settings)
        assert ping.monitor_id == FAKE_ID
        assert ping.api_key == PING_API_KEY

    @pytest.mark.parametrize("endpoint", ENDPOINTS)
    def test_calls_endpoint(self, endpoint: str, transport: RecordingTransport, settings: ClientSettings) -> None:
        """Test each endpoint issues one GET to its path."""
        ping = _ping(transport, settings)
        response = getattr(ping, endpoint)()

        assert response.status_code == 200
        assert len(transport.requests) == 1
        request = transport.last
        assert request.method == "GET"
        assert request.url.host == "cronitor.link"
        assert request.url.path == f"/{FAKE_ID}/{endpoint}"
        assert request.url.query == b""

    @pytest.mark.parametrize("endpoint", ENDPOINTS)
    def test_calls_endpoint_with_message(
        self, endpoint: str, transport: RecordingTransport, settings: ClientSettings
    ) -> None:
        """Test a bare string is sent as msg."""
        ping = _ping(transport, settings)
        getattr(ping, endpoint)("hello there")
        assert dict(transport.last.url.params) == {"msg": "hello there"}

    @pytest.mark.parametrize("endpoint", ENDPOINTS)
    def test_calls_endpoint_with_all_params(
        self, endpoint: str, transport: RecordingTransport, settings: ClientSettings
    ) -> None:
        """Test every supported parameter reaches the query string."""
        ping = _ping(transport, settings, api_key=PING_API_KEY)
        getattr(ping, endpoint)("hello there", **VALID_PARAMS)

        assert ping.url_for(endpoint, "hello there", **VALID_PARAMS).endswith(
            "?msg=hello+there&count=1&error_count=1&env=production"
            "&duration=100&host=10-0-0-223&series=world&auth_key=12345"
        )
        params = transport.last.url.params
        assert params["msg"] == "hello there"
        assert params["error_count"] == "1"
        assert params["auth_key"] == PING_API_KEY

    def test_authed_ping(self, transport: RecordingTransport, settings: ClientSettings) -> None:
        """Test the auth key is appended when configured."""
        ping = _ping(transport, settings, api_key=PING_API_KEY)
        ping.run()
        assert dict(transport.last.url.params) == {"auth_key": PING_API_KEY}

    def test_tick_omits_zero_count(self, transport: RecordingTransport, settings: ClientSettings) -> None:
        """Test a zero count is not sent while error_count is."""
        ping = _ping(transport, settings)
        ping.tick(count=0, error_count=2, duration=60)
        assert dict(transport.last.url.params) == {"error_count": "2", "duration": "60"}

    def test_unknown_endpoint(self, transport: RecordingTransport, settings: ClientSettings) -> None:
        """Test send rejects endpoints outside the known set."""
        ping = _ping(transport, settings)
        with pytest.raises(ValueError, match="Unknown ping endpoint"):
            ping.send("pause")
        assert transport.requests == []

    def test_error_status_raises(self, settings: ClientSettings) -> None:
        """Test a non-2xx response raises TransportError with the status."""
        transport = RecordingTransport(lambda request: httpx.Response(503, text="unavailable"))
        ping = _ping(transport, settings)

        with pytest.raises(TransportError) as exc_info:
            ping.complete()

        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "unavailable"

    def test_connection_error_raises(self, settings: ClientSettings) -> None:
        """Test connection failures are wrapped in TransportError."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        ping = _ping(RecordingTransport(refuse), settings)
        with pytest.raises(TransportError) as exc_info:
            ping.run()
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_custom_ping_url(self, transport: RecordingTransport) -> None:
        """Test the ping base URL comes from settings."""
        settings = ClientSettings(ping_api_url="https://ping.example.test")
        ping = _ping(transport, settings)
        ping.ok()
        assert str(transport.last.url) == f"https://ping.example.test/{FAKE_ID}/ok"

    def test_close_keeps_injected_client(self, transport: RecordingTransport, settings: ClientSettings) -> None:
        """Test close leaves a caller-provided client open."""
        client = httpx.Client(transport=transport)
        with Ping(FAKE_ID, settings=settings, client=client) as ping:
            ping.run()
        assert client.is_closed is False
