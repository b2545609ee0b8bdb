"""Per-request tunnel routing decision."""

from __future__ import annotations

from urllib.parse import urlsplit

import structlog

from tunnelroute.core.models.tunnel import ProxyConfig

logger = structlog.get_logger(__name__)


def extract_host(url: str) -> str | None:
    """Return the host component of a URL exactly as written.

    Case is preserved. Userinfo and port are removed; IPv6 literals keep
    their brackets. Returns None when the URL has no parseable host.
    """
    if not isinstance(url, str):
        return None
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None

    hostport = parts.netloc.rpartition("@")[2]
    if not hostport:
        return None

    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1:
            return None
        host = hostport[: end + 1]
    else:
        host = hostport.partition(":")[0]

    return host or None


def should_route(url: str, config: ProxyConfig) -> bool:
    """Decide whether a request to url must go through the tunnel.

    Fails closed: a URL without a parseable host is never routed. With
    route_all set every other URL is routed; otherwise the host must equal
    one whitelist entry exactly (no subdomain or wildcard matching).
    """
    host = extract_host(url)
    if host is None:
        logger.debug("Unparseable URL, not routing", url=url)
        return False

    if config.route_all:
        route = True
    else:
        route = host in config.whitelist_domains

    logger.debug("Routing decision", host=host, route=route, route_all=config.route_all)
    return route
