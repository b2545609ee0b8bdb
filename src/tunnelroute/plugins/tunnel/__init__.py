"""Tunnel health and diagnostics plugins."""

from tunnelroute.plugins.tunnel.health import (
    PROBE_TIMEOUT,
    ProbeDeadlineExceeded,
    TunnelHealthChecker,
    default_client_factory,
)
from tunnelroute.plugins.tunnel.inspector import (
    LsofTunnelInspector,
    NetstatTunnelInspector,
    create_inspector,
)

__all__ = [
    # Health
    "PROBE_TIMEOUT",
    "ProbeDeadlineExceeded",
    "TunnelHealthChecker",
    "default_client_factory",
    # Inspection
    "LsofTunnelInspector",
    "NetstatTunnelInspector",
    "create_inspector",
]
