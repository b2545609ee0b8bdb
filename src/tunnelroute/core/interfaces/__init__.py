"""Interface definitions."""

from tunnelroute.core.interfaces.inspector import IActiveTunnelInspector

__all__ = [
    "IActiveTunnelInspector",
]
