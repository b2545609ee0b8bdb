"""Data models and settings."""

from tunnelroute.core.models.config import Settings
from tunnelroute.core.models.tunnel import (
    DEFAULT_TUNNEL_HOST,
    DEFAULT_TUNNEL_PORT,
    ProxyConfig,
    RequestDescriptor,
    TunnelOutcome,
    TunnelStatus,
)

__all__ = [
    "DEFAULT_TUNNEL_HOST",
    "DEFAULT_TUNNEL_PORT",
    "ProxyConfig",
    "RequestDescriptor",
    "Settings",
    "TunnelOutcome",
    "TunnelStatus",
]
