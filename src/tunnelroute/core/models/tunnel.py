"""Tunnel routing data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TUNNEL_HOST = "127.0.0.1"
DEFAULT_TUNNEL_PORT = 8080

# Transport hint keys set on a RequestDescriptor
HINT_PROXY = "proxy"
HINT_PROXY_HOST = "proxy_host"
HINT_PROXY_PORT = "proxy_port"
HINT_PROXY_TYPE = "proxy_type"
HINT_VERIFY = "verify"
HINT_TRANSPORT = "transport"
HINT_VERBOSE = "verbose"

PROXY_TYPE_SOCKS5H = "socks5h"
TRANSPORT_SOCKS = "socks"

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})


class TunnelOutcome(str, Enum):
    """Result classification of a tunnel probe."""

    SUCCESS = "success"
    ERROR = "error"


def coerce_bool(value: Any) -> bool:
    """Interpret a stored flag (bool, int or checkbox-style string)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def coerce_port(value: Any, default: int = DEFAULT_TUNNEL_PORT) -> int:
    """Return value as a TCP port, or default when it is not one."""
    if isinstance(value, bool):
        return default
    try:
        port = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        return default
    if 1 <= port <= 65535:
        return port
    return default


def parse_whitelist(value: Any) -> tuple[str, ...]:
    """Split a newline-separated whitelist into trimmed entries.

    Blank lines are dropped. Order and duplicates are kept as stored.
    A list or tuple of strings is accepted as well.
    """
    if not value:
        return ()
    if isinstance(value, str):
        entries = value.split("\n")
    elif isinstance(value, (list, tuple)):
        entries = [str(v) for v in value]
    else:
        return ()
    return tuple(e.strip() for e in entries if e.strip())


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable snapshot of the tunnel routing settings.

    Loaded fresh from the configuration store at the start of every routing
    decision or health check. A saved change produces a new snapshot; an
    existing one is never modified.
    """

    tunnel_host: str = DEFAULT_TUNNEL_HOST
    tunnel_port: int = DEFAULT_TUNNEL_PORT
    debug_mode: bool = False
    route_all: bool = False
    whitelist_domains: tuple[str, ...] = ()

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> ProxyConfig:
        """Build a sanitized snapshot from raw stored values.

        Missing or invalid values fall back to the defaults silently.
        """
        raw_host = values.get("tunnel_host")
        host = raw_host.strip() if isinstance(raw_host, str) else ""
        if not host:
            if raw_host not in (None, ""):
                logger.debug("Invalid tunnel host, using default", value=raw_host)
            host = DEFAULT_TUNNEL_HOST

        raw_port = values.get("tunnel_port")
        port = coerce_port(raw_port, default=0)
        if not port:
            if raw_port is not None:
                logger.debug("Invalid tunnel port, using default", value=raw_port)
            port = DEFAULT_TUNNEL_PORT

        return cls(
            tunnel_host=host,
            tunnel_port=port,
            debug_mode=coerce_bool(values.get("debug_mode", False)),
            route_all=coerce_bool(values.get("route_all", False)),
            whitelist_domains=parse_whitelist(values.get("whitelist_domains", "")),
        )

    @classmethod
    def from_store(cls, store: Any) -> ProxyConfig:
        """Load a snapshot from a configuration store."""
        return cls.from_values(store.all())

    @property
    def proxy_url(self) -> str:
        """SOCKS5 proxy URL with proxy-side DNS resolution."""
        host = self.tunnel_host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"{PROXY_TYPE_SOCKS5H}://{host}:{self.tunnel_port}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tunnel_host": self.tunnel_host,
            "tunnel_port": self.tunnel_port,
            "debug_mode": self.debug_mode,
            "route_all": self.route_all,
            "whitelist_domains": list(self.whitelist_domains),
        }


@dataclass(frozen=True)
class RequestDescriptor:
    """Outbound HTTP request as seen by the routing layer."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    transport: dict[str, Any] = field(default_factory=dict)

    @property
    def is_tunneled(self) -> bool:
        """Whether the descriptor demands the SOCKS transport."""
        return self.transport.get(HINT_TRANSPORT) == TRANSPORT_SOCKS


@dataclass
class TunnelStatus:
    """Outcome of a single tunnel probe."""

    outcome: TunnelOutcome
    message: str
    external_ip: str | None = None

    @property
    def is_operational(self) -> bool:
        """Whether the probe got an answer through the tunnel."""
        return self.outcome == TunnelOutcome.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON status payload."""
        return {
            "status": self.outcome.value,
            "message": self.message,
            "external_ip": self.external_ip,
        }
