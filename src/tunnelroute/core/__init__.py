"""Core module - models, configuration store and routing."""

from tunnelroute.core.config.store import JsonConfigStore, MemoryConfigStore
from tunnelroute.core.models.tunnel import ProxyConfig, RequestDescriptor, TunnelStatus
from tunnelroute.core.routing import augment, should_route

__all__ = [
    "JsonConfigStore",
    "MemoryConfigStore",
    "ProxyConfig",
    "RequestDescriptor",
    "TunnelStatus",
    "augment",
    "should_route",
]
