"""Apply tunnel transport settings to an outbound request."""

from __future__ import annotations

from dataclasses import replace

import certifi
import structlog

from tunnelroute.core.models.tunnel import (
    HINT_PROXY,
    HINT_PROXY_HOST,
    HINT_PROXY_PORT,
    HINT_PROXY_TYPE,
    HINT_TRANSPORT,
    HINT_VERBOSE,
    HINT_VERIFY,
    PROXY_TYPE_SOCKS5H,
    TRANSPORT_SOCKS,
    ProxyConfig,
    RequestDescriptor,
)

logger = structlog.get_logger(__name__)


def default_ca_bundle() -> str:
    """Path of the CA bundle used when the caller supplies none."""
    return certifi.where()


def augment(
    req: RequestDescriptor,
    route: bool,
    config: ProxyConfig,
    *,
    ca_bundle: str | None = None,
) -> RequestDescriptor:
    """Return req with the tunnel transport hints applied.

    Args:
        req: Outbound request; never modified.
        route: Routing decision for req.url.
        config: Snapshot the decision was made with.
        ca_bundle: TLS trust bundle path. Only applied when req does not
            already carry a verify hint.

    Returns:
        req itself when route is False, otherwise an augmented copy.
    """
    if not route:
        return req

    transport = dict(req.transport)
    transport[HINT_PROXY] = config.proxy_url
    transport[HINT_PROXY_HOST] = config.tunnel_host
    transport[HINT_PROXY_PORT] = config.tunnel_port
    transport[HINT_PROXY_TYPE] = PROXY_TYPE_SOCKS5H
    transport[HINT_TRANSPORT] = TRANSPORT_SOCKS
    transport.setdefault(HINT_VERIFY, ca_bundle or default_ca_bundle())

    if config.debug_mode:
        transport[HINT_VERBOSE] = True
        logger.info("Routing request through tunnel", url=req.url, transport=transport)

    return replace(req, headers=dict(req.headers), transport=transport)
