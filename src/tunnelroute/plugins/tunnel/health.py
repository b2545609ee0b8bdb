"""Out-of-band tunnel health probe."""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Callable

import httpx
import structlog

from tunnelroute.core.models.config import DEFAULT_IP_ECHO_URL
from tunnelroute.core.models.tunnel import ProxyConfig, TunnelOutcome, TunnelStatus

logger = structlog.get_logger(__name__)

PROBE_TIMEOUT = 5.0
OPERATIONAL_MESSAGE = "Tunnel is operational"
FAILURE_PREFIX = "Tunnel connection failed: "

ClientFactory = Callable[[ProxyConfig | None], httpx.AsyncClient]

# Everything a probe may raise for a bad tunnel or a bad stored host
PROBE_ERRORS = (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError)


class ProbeDeadlineExceeded(httpx.TimeoutException):
    """The whole probe took longer than the overall deadline."""

    pass


def default_client_factory(config: ProxyConfig | None) -> httpx.AsyncClient:
    """Build the probe client.

    Args:
        config: Tunnel to probe through, or None for a direct client.
    """
    return httpx.AsyncClient(
        proxy=config.proxy_url if config else None,
        timeout=httpx.Timeout(PROBE_TIMEOUT, connect=PROBE_TIMEOUT),
        trust_env=False,
    )


def _extract_ip(body: bytes) -> str | None:
    """Read the `ip` field of an echo response, if there is one."""
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    ip = data.get("ip")
    return ip if isinstance(ip, str) and ip else None


class TunnelHealthChecker:
    """Checks that the SOCKS5 tunnel is reachable and forwarding traffic.

    A single GET to an "echo my IP" service is sent through the tunnel per
    call. There are no retries; the caller re-invokes on manual refresh.

    Usage:
        ```python
        checker = TunnelHealthChecker()
        status = checker.check_tunnel(ProxyConfig.from_store(store))
        if status.is_operational:
            print(status.external_ip)
        ```
    """

    def __init__(
        self,
        echo_url: str = DEFAULT_IP_ECHO_URL,
        *,
        client_factory: ClientFactory | None = None,
        deadline: float = PROBE_TIMEOUT,
    ) -> None:
        """Initialize health checker.

        Args:
            echo_url: Endpoint answering with {"ip": "<address>"}
            client_factory: Builds the httpx client for a tunnel config
            deadline: Overall time budget for one probe in seconds
        """
        self.echo_url = echo_url
        self._client_factory = client_factory or default_client_factory
        self._deadline = deadline

    async def _get(self, config: ProxyConfig | None) -> tuple[int, bytes]:
        async with self._client_factory(config) as client:
            response = await client.get(self.echo_url)
            return response.status_code, response.content

    async def _fetch_within_deadline(self, config: ProxyConfig | None) -> tuple[int, bytes]:
        # Covers connect, SOCKS handshake, headers and body together
        try:
            return await asyncio.wait_for(self._get(config), timeout=self._deadline)
        except TimeoutError as e:
            raise ProbeDeadlineExceeded(
                f"Operation timed out after {self._deadline:g} seconds"
            ) from e

    def _fetch(self, config: ProxyConfig | None) -> tuple[int, bytes]:
        """GET the echo URL, giving up once the overall deadline passes.

        Must be called from a thread without a running event loop. The loop is
        closed without joining resolver threads still blocked past the deadline.
        """
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(self._fetch_within_deadline(config))
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()

    def check_tunnel(self, config: ProxyConfig) -> TunnelStatus:
        """Probe the tunnel described by config.

        Never raises for network problems or unusable tunnel settings:
        failures come back as an ERROR status carrying the error text.
        """
        start = time.monotonic()
        try:
            status_code, body = self._fetch(config)
        except PROBE_ERRORS as e:
            error = str(e) or type(e).__name__
            logger.warning(
                "Tunnel check failed",
                proxy=config.proxy_url,
                error=error,
                elapsed_ms=round((time.monotonic() - start) * 1000, 2),
            )
            return TunnelStatus(
                outcome=TunnelOutcome.ERROR,
                message=f"{FAILURE_PREFIX}{error}",
                external_ip=None,
            )

        latency_ms = (time.monotonic() - start) * 1000
        if not 200 <= status_code < 300:
            logger.warning("Echo service returned non-success status", status=status_code)

        external_ip = _extract_ip(body)
        logger.info(
            "Tunnel check complete",
            proxy=config.proxy_url,
            external_ip=external_ip,
            latency_ms=round(latency_ms, 2),
        )
        return TunnelStatus(
            outcome=TunnelOutcome.SUCCESS,
            message=OPERATIONAL_MESSAGE,
            external_ip=external_ip,
        )

    def check_direct(self) -> str | None:
        """Return the public IP seen without the tunnel, or None on failure."""
        try:
            _, body = self._fetch(None)
        except PROBE_ERRORS as e:
            logger.warning("Direct IP lookup failed", error=str(e) or type(e).__name__)
            return None
        return _extract_ip(body)
