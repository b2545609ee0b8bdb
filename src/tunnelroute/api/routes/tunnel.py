"""Tunnel status and settings API endpoints."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query

from tunnelroute.api.auth import require_operator
from tunnelroute.api.schemas import (
    RouteDecisionResponse,
    StatusReportResponse,
    TunnelConfigResponse,
    TunnelConfigUpdate,
)
from tunnelroute.core.config.store import ConfigStore, save_settings
from tunnelroute.core.models.tunnel import ProxyConfig
from tunnelroute.core.routing import extract_host, should_route
from tunnelroute.core.status import TunnelStatusService

logger = structlog.get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_operator)])


def _get_store() -> ConfigStore:
    """Get store with late import to avoid circular dependency."""
    from tunnelroute.api.app import get_store

    return get_store()


def _get_status_service() -> TunnelStatusService:
    """Get status service with late import to avoid circular dependency."""
    from tunnelroute.api.app import get_status_service

    return get_status_service()


def _config_response(config: ProxyConfig) -> dict[str, Any]:
    return {**config.to_dict(), "proxy_url": config.proxy_url}


@router.post("/test", response_model=StatusReportResponse, response_model_exclude_unset=True)
async def test_tunnel(
    include_direct: bool = Query(default=False),
    service: TunnelStatusService = Depends(_get_status_service),
) -> dict[str, Any]:
    """
    Test the tunnel now.

    Sends one probe through the tunnel and lists local sockets on the
    tunnel port. Probe failures are reported in the payload, not as HTTP
    errors.
    """
    return await asyncio.to_thread(service.test_tunnel, include_direct=include_direct)


@router.get("/route", response_model=RouteDecisionResponse)
async def preview_route(
    url: str = Query(..., min_length=1),
    store: ConfigStore = Depends(_get_store),
) -> dict[str, Any]:
    """Show whether a request to url would be routed through the tunnel."""
    config = ProxyConfig.from_store(store)
    return {"url": url, "host": extract_host(url), "route": should_route(url, config)}


@router.get("/config", response_model=TunnelConfigResponse)
async def get_config(store: ConfigStore = Depends(_get_store)) -> dict[str, Any]:
    """Get the current tunnel settings."""
    return _config_response(ProxyConfig.from_store(store))


@router.put("/config", response_model=TunnelConfigResponse)
async def update_config(
    payload: TunnelConfigUpdate,
    store: ConfigStore = Depends(_get_store),
) -> dict[str, Any]:
    """
    Update the tunnel settings.

    Only the fields present in the body are changed. The returned snapshot
    is what the next routed request will use.
    """
    changed = save_settings(store, payload.model_dump(exclude_none=True))
    logger.info("Tunnel settings updated via API", fields=sorted(changed))
    return _config_response(ProxyConfig.from_store(store))
