"""OS command based inspectors for sockets bound to the tunnel port."""

from __future__ import annotations

import platform
import re
import subprocess

import structlog

from tunnelroute.core.interfaces.inspector import IActiveTunnelInspector

logger = structlog.get_logger(__name__)

COMMAND_TIMEOUT = 5.0


def _run_command(args: list[str]) -> list[str]:
    """Run a diagnostic command and return its non-blank stdout lines.

    Any failure to execute degrades to an empty list.
    """
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=COMMAND_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError, ValueError) as e:
        logger.warning("Tunnel inspection command failed", command=args[0], error=str(e))
        return []

    return [line for line in result.stdout.splitlines() if line.strip()]


class LsofTunnelInspector:
    """Lists tunnel sockets with `lsof -i :PORT` (Linux, macOS, BSD)."""

    name = "lsof"

    def list_active_tunnels(self, port: int) -> list[str]:
        # lsof exits 1 with empty output when nothing matches
        return _run_command(["lsof", "-i", f":{port}"])


class NetstatTunnelInspector:
    """Lists tunnel sockets from `netstat -n` (Windows)."""

    name = "netstat"

    def list_active_tunnels(self, port: int) -> list[str]:
        pattern = re.compile(rf":{port}(?!\d)")
        return [line for line in _run_command(["netstat", "-n"]) if pattern.search(line)]


def create_inspector(system: str | None = None) -> IActiveTunnelInspector:
    """Pick the inspector for the running OS family.

    Args:
        system: OS name as returned by platform.system(); detected when None.
    """
    system = (system or platform.system()).lower()
    if system == "windows":
        return NetstatTunnelInspector()
    return LsofTunnelInspector()
