"""Global test fixtures for tunnelroute."""

from __future__ import annotations

import pytest

# Import pytest plugins
from tests.pytest_plugins.markers import (
    pytest_addoption,
    pytest_collection_modifyitems,
    pytest_configure,
)
from tests.pytest_plugins.mock_services import (
    EchoService,
    RecordingInspector,
    StallingSocksServer,
)

# Re-export for pytest discovery
__all__ = [
    "EchoService",
    "RecordingInspector",
    "StallingSocksServer",
    "pytest_addoption",
    "pytest_collection_modifyitems",
    "pytest_configure",
]


# ============================================================================
# PYTEST FIXTURES - CONFIGURATION
# ============================================================================


@pytest.fixture
def memory_store():
    """Create an empty in-memory configuration store."""
    from tunnelroute.core.config.store import MemoryConfigStore

    return MemoryConfigStore()


@pytest.fixture
def whitelist_store():
    """Store with two whitelisted domains and route-all off."""
    from tunnelroute.core.config.store import MemoryConfigStore

    return MemoryConfigStore(
        {
            "tunnel_host": "10.0.0.5",
            "tunnel_port": 1080,
            "debug_mode": False,
            "route_all": False,
            "whitelist_domains": "a.example.com\nb.example.com",
        }
    )


@pytest.fixture
def proxy_config():
    """Create a test tunnel snapshot."""
    from tunnelroute.core.models.tunnel import ProxyConfig

    return ProxyConfig(
        tunnel_host="10.0.0.5",
        tunnel_port=1080,
        whitelist_domains=("a.example.com", "b.example.com"),
    )


@pytest.fixture
def settings(tmp_path):
    """Create settings isolated from the environment."""
    from tunnelroute.core.models.config import Settings

    return Settings(
        store_path=tmp_path / "tunnel.json",
        operator_token="operator-secret",
        ca_bundle="/etc/ssl/test-bundle.pem",
    )


# ============================================================================
# PYTEST FIXTURES - SIMULATED SERVICES
# ============================================================================


@pytest.fixture
def echo_service() -> EchoService:
    """Simulated IP echo endpoint answering through the tunnel."""
    return EchoService()


@pytest.fixture
def inspector() -> RecordingInspector:
    """Inspector with one canned lsof line."""
    return RecordingInspector(
        lines=[
            "COMMAND  PID USER   FD   TYPE DEVICE SIZE/OFF NODE NAME",
            "ssh     4242 root    5u  IPv4  31337      0t0  TCP localhost:1080 (LISTEN)",
        ]
    )


@pytest.fixture
def stalling_socks():
    """Start local SOCKS5 servers that never complete a response."""
    servers: list[StallingSocksServer] = []

    def start(mode: str = "headers", header_delay: float = 0.0) -> StallingSocksServer:
        server = StallingSocksServer(mode, header_delay).start()
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.close()
