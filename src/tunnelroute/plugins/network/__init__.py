"""Network plugins for routed request dispatch."""

from tunnelroute.plugins.network.routed_client import (
    ProxyTransportError,
    RoutedClient,
    default_dispatch_factory,
)

__all__ = [
    "ProxyTransportError",
    "RoutedClient",
    "default_dispatch_factory",
]
