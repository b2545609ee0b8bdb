"""HTTP client that applies per-request tunnel routing.

Every request takes a fresh ProxyConfig snapshot from the configuration
store, runs the routing decision and the augmenter, and is then dispatched on
a short-lived httpx client built from the resulting transport hints.
"""

from __future__ import annotations

import ssl
from collections.abc import Callable, Mapping
from typing import Any

import httpx
import structlog

from tunnelroute.core.config.store import ConfigStore
from tunnelroute.core.errors import TunnelRouteError
from tunnelroute.core.models.config import Settings
from tunnelroute.core.models.tunnel import (
    HINT_PROXY,
    HINT_VERBOSE,
    HINT_VERIFY,
    ProxyConfig,
    RequestDescriptor,
)
from tunnelroute.core.routing import augment, should_route

logger = structlog.get_logger(__name__)

DispatchFactory = Callable[[RequestDescriptor, float], httpx.Client]


class ProxyTransportError(TunnelRouteError):
    """A tunneled request cannot be given a proxy-capable transport."""

    pass


def _verify_option(value: Any) -> ssl.SSLContext | bool:
    """Turn a verify hint into something httpx accepts."""
    if isinstance(value, str):
        return ssl.create_default_context(cafile=value)
    if value is None:
        return True
    return value


def _tracing_hooks() -> dict[str, list[Callable[..., None]]]:
    """Event hooks that log every request and response."""

    def log_request(request: httpx.Request) -> None:
        logger.debug(
            "Tunnel request",
            method=request.method,
            url=str(request.url),
            headers=dict(request.headers),
        )

    def log_response(response: httpx.Response) -> None:
        logger.debug(
            "Tunnel response",
            url=str(response.request.url),
            status=response.status_code,
            http_version=response.http_version,
        )

    return {"request": [log_request], "response": [log_response]}


def default_dispatch_factory(descriptor: RequestDescriptor, timeout: float) -> httpx.Client:
    """Build the httpx client that carries one descriptor.

    A tunneled descriptor always gets an explicit proxy transport and
    ignores environment proxy variables.
    """
    hints = descriptor.transport
    verify = _verify_option(hints.get(HINT_VERIFY))
    event_hooks = _tracing_hooks() if hints.get(HINT_VERBOSE) else None

    if descriptor.is_tunneled:
        transport = httpx.HTTPTransport(proxy=hints[HINT_PROXY], verify=verify)
        return httpx.Client(
            transport=transport,
            timeout=timeout,
            trust_env=False,
            event_hooks=event_hooks,
        )

    return httpx.Client(verify=verify, timeout=timeout, event_hooks=event_hooks)


class RoutedClient:
    """Synchronous HTTP client with selective tunnel routing.

    Usage:
        ```python
        store = JsonConfigStore("data/config/tunnel.json")
        client = RoutedClient(store)

        response = client.get("https://api.example.com/resource")
        ```
    """

    def __init__(
        self,
        store: ConfigStore,
        *,
        settings: Settings | None = None,
        client_factory: DispatchFactory | None = None,
    ) -> None:
        """Initialize routed client.

        Args:
            store: Configuration store holding the tunnel settings
            settings: Process settings (CA bundle, request timeout)
            client_factory: Builds the httpx client for a descriptor
        """
        self.store = store
        self.settings = settings or Settings()
        self._client_factory = client_factory or default_dispatch_factory

    def snapshot(self) -> ProxyConfig:
        """Load the current tunnel settings."""
        return ProxyConfig.from_store(self.store)

    def prepare(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        *,
        config: ProxyConfig | None = None,
    ) -> RequestDescriptor:
        """Build the descriptor for a request, with routing applied."""
        config = config or self.snapshot()
        descriptor = RequestDescriptor(url=url, method=method.upper(), headers=dict(headers or {}))
        route = should_route(url, config)
        return augment(descriptor, route, config, ca_bundle=self.settings.ca_bundle)

    def send(self, descriptor: RequestDescriptor, **kwargs: Any) -> httpx.Response:
        """Dispatch a prepared descriptor.

        Raises:
            ProxyTransportError: The descriptor demands the tunnel but has
                no proxy address.
            httpx.HTTPError: Transport failures of the request itself.
        """
        if descriptor.is_tunneled and not descriptor.transport.get(HINT_PROXY):
            raise ProxyTransportError(f"No proxy set for tunneled request to {descriptor.url}")

        with self._client_factory(descriptor, self.settings.request_timeout) as client:
            return client.request(
                descriptor.method,
                descriptor.url,
                headers=descriptor.headers,
                **kwargs,
            )

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Decide, augment and send in one call."""
        return self.send(self.prepare(method, url, headers), **kwargs)

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, **kwargs)
