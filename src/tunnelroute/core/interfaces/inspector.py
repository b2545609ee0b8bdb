"""Active tunnel inspector interface definitions."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IActiveTunnelInspector(Protocol):
    """Contract for listing local sockets bound to the tunnel port."""

    @property
    def name(self) -> str:
        """Inspector name."""
        ...

    def list_active_tunnels(self, port: int) -> list[str]:
        """
        List diagnostic lines for sockets using port.

        Args:
            port: Tunnel port to look for

        Returns:
            Raw, human-readable output lines. Empty when nothing is bound or
            the underlying command is unavailable. Never raises.
        """
        ...
