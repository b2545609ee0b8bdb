"""Operator-facing "test tunnel now" status check."""

from __future__ import annotations

from typing import Any

import structlog

from tunnelroute.core.config.store import ConfigStore
from tunnelroute.core.interfaces.inspector import IActiveTunnelInspector
from tunnelroute.core.models.tunnel import ProxyConfig
from tunnelroute.plugins.tunnel.health import TunnelHealthChecker
from tunnelroute.plugins.tunnel.inspector import create_inspector

logger = structlog.get_logger(__name__)


class TunnelStatusService:
    """Combines the health probe and socket inspection into one report."""

    def __init__(
        self,
        store: ConfigStore,
        *,
        checker: TunnelHealthChecker | None = None,
        inspector: IActiveTunnelInspector | None = None,
    ) -> None:
        self.store = store
        self.checker = checker or TunnelHealthChecker()
        self.inspector = inspector or create_inspector()

    def test_tunnel(self, *, include_direct: bool = False) -> dict[str, Any]:
        """Run one probe and one inspection against the current settings.

        Args:
            include_direct: Also look up the public IP without the tunnel,
                so the operator can compare the two addresses.

        Returns:
            {"tunnel_status": {...}, "active_tunnels": [...]} plus
            "direct_ip" when requested. Always JSON-serializable.
        """
        config = ProxyConfig.from_store(self.store)

        status = self.checker.check_tunnel(config)
        active_tunnels = self.inspector.list_active_tunnels(config.tunnel_port)

        report: dict[str, Any] = {
            "tunnel_status": status.to_dict(),
            "active_tunnels": active_tunnels,
        }
        if include_direct:
            report["direct_ip"] = self.checker.check_direct()

        logger.info(
            "Tunnel status report",
            outcome=status.outcome.value,
            active_tunnels=len(active_tunnels),
        )
        return report
