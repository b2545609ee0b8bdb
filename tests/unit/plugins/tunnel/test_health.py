"""Tests for TunnelHealthChecker."""

from __future__ import annotations

import asyncio
import socket
import time

import httpx
import pytest

from tunnelroute.core.models.tunnel import ProxyConfig, TunnelOutcome
from tunnelroute.plugins.tunnel import TunnelHealthChecker, default_client_factory
from tunnelroute.plugins.tunnel.health import FAILURE_PREFIX, OPERATIONAL_MESSAGE, PROBE_TIMEOUT

ECHO_URL = "https://echo.test/?format=json"


@pytest.fixture
def checker(echo_service):
    return TunnelHealthChecker(ECHO_URL, client_factory=echo_service.factory)


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestCheckTunnel:
    """Tests for check_tunnel."""

    def test_success(self, checker, echo_service, proxy_config):
        status = checker.check_tunnel(proxy_config)

        assert status.outcome == TunnelOutcome.SUCCESS
        assert status.message == OPERATIONAL_MESSAGE == "Tunnel is operational"
        assert status.external_ip == "203.0.113.7"

    def test_single_request_through_config(self, checker, echo_service, proxy_config):
        checker.check_tunnel(proxy_config)

        assert echo_service.configs == [proxy_config]
        assert len(echo_service.requests) == 1
        assert echo_service.requests[0].method == "GET"
        assert str(echo_service.requests[0].url) == ECHO_URL

    def test_connection_error(self, checker, echo_service, proxy_config):
        echo_service.error = httpx.ConnectError("Connection refused")

        status = checker.check_tunnel(proxy_config)

        assert status.outcome == TunnelOutcome.ERROR
        assert status.message == "Tunnel connection failed: Connection refused"
        assert status.external_ip is None

    def test_no_retry_after_failure(self, checker, echo_service, proxy_config):
        echo_service.error = httpx.ConnectTimeout("timed out")

        checker.check_tunnel(proxy_config)

        assert len(echo_service.configs) == 1

    def test_empty_error_text_uses_type_name(self, checker, echo_service, proxy_config):
        echo_service.error = httpx.ReadError("")

        status = checker.check_tunnel(proxy_config)

        assert status.message == f"{FAILURE_PREFIX}ReadError"

    def test_body_without_ip(self, checker, echo_service, proxy_config):
        echo_service.ip = None

        status = checker.check_tunnel(proxy_config)

        assert status.outcome == TunnelOutcome.SUCCESS
        assert status.external_ip is None

    def test_non_json_body(self, checker, echo_service, proxy_config):
        echo_service.body = b"<html>hello</html>"

        status = checker.check_tunnel(proxy_config)

        assert status.outcome == TunnelOutcome.SUCCESS
        assert status.external_ip is None

    def test_non_string_ip(self, checker, echo_service, proxy_config):
        echo_service.body = b'{"ip": 42}'
        assert checker.check_tunnel(proxy_config).external_ip is None

    def test_non_success_status_still_operational(self, checker, echo_service, proxy_config):
        echo_service.status_code = 503

        status = checker.check_tunnel(proxy_config)

        assert status.outcome == TunnelOutcome.SUCCESS

    def test_overall_deadline(self, echo_service, proxy_config):
        echo_service.delay = 5.0
        checker = TunnelHealthChecker(ECHO_URL, client_factory=echo_service.factory, deadline=0.2)

        start = time.monotonic()
        status = checker.check_tunnel(proxy_config)

        assert time.monotonic() - start < 2.0
        assert status.outcome == TunnelOutcome.ERROR
        assert status.message == f"{FAILURE_PREFIX}Operation timed out after 0.2 seconds"

    def test_unreachable_tunnel(self):
        config = ProxyConfig(tunnel_host="127.0.0.1", tunnel_port=_free_port())
        checker = TunnelHealthChecker("http://echo.invalid/")

        status = checker.check_tunnel(config)

        assert status.outcome == TunnelOutcome.ERROR
        assert status.message.startswith(FAILURE_PREFIX)
        assert len(status.message) > len(FAILURE_PREFIX)
        assert status.external_ip is None

    @pytest.mark.parametrize("host", ["x" * 300, "[::1"])
    def test_unusable_host_is_error_status(self, host):
        config = ProxyConfig(tunnel_host=host, tunnel_port=1080)
        checker = TunnelHealthChecker("http://echo.invalid/", deadline=2.0)

        status = checker.check_tunnel(config)

        assert status.outcome == TunnelOutcome.ERROR
        assert status.message.startswith(FAILURE_PREFIX)
        assert status.external_ip is None


class TestTunnelCheckTimeBound:
    """A stalled tunnel is reported as an error within the overall deadline."""

    def test_stalled_greeting(self, stalling_socks):
        server = stalling_socks("greeting")
        config = ProxyConfig(tunnel_host="127.0.0.1", tunnel_port=server.port)
        checker = TunnelHealthChecker("http://echo.test/", deadline=1.0)

        start = time.monotonic()
        status = checker.check_tunnel(config)
        elapsed = time.monotonic() - start

        assert server.connections == 1
        assert elapsed < 1.5
        assert status.outcome == TunnelOutcome.ERROR
        assert status.message == f"{FAILURE_PREFIX}Operation timed out after 1 seconds"

    def test_headers_late_then_stall(self, stalling_socks):
        server = stalling_socks("headers", header_delay=4.0)
        config = ProxyConfig(tunnel_host="127.0.0.1", tunnel_port=server.port)
        checker = TunnelHealthChecker("http://echo.test/")

        start = time.monotonic()
        status = checker.check_tunnel(config)
        elapsed = time.monotonic() - start

        assert elapsed <= PROBE_TIMEOUT + 0.5
        assert status.outcome == TunnelOutcome.ERROR
        assert status.message == f"{FAILURE_PREFIX}Operation timed out after 5 seconds"

    def test_direct_lookup_bounded(self, echo_service):
        echo_service.delay = 5.0
        checker = TunnelHealthChecker(ECHO_URL, client_factory=echo_service.factory, deadline=0.2)

        start = time.monotonic()
        assert checker.check_direct() is None
        assert time.monotonic() - start < 2.0


class TestCheckDirect:
    """Tests for check_direct."""

    def test_direct_ip(self, checker, echo_service):
        assert checker.check_direct() == "198.51.100.1"
        assert echo_service.configs == [None]

    def test_failure_returns_none(self, checker, echo_service):
        echo_service.error = httpx.ConnectError("unreachable")
        assert checker.check_direct() is None


class TestDefaultClientFactory:
    """Tests for default_client_factory."""

    def test_ignores_environment(self, proxy_config):
        client = default_client_factory(proxy_config)

        assert isinstance(client, httpx.AsyncClient)
        assert client.trust_env is False
        assert client.timeout.connect == PROBE_TIMEOUT
        asyncio.run(client.aclose())

    def test_direct_client(self):
        client = default_client_factory(None)

        assert client.trust_env is False
        asyncio.run(client.aclose())
