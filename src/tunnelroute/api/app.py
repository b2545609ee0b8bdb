"""FastAPI application for the tunnel operator API."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI

from tunnelroute import __version__
from tunnelroute.api.routes import tunnel
from tunnelroute.core.config.store import ConfigStore, JsonConfigStore, ensure_defaults
from tunnelroute.core.logging import setup_logging
from tunnelroute.core.models.config import Settings
from tunnelroute.core.status import TunnelStatusService
from tunnelroute.plugins.tunnel.health import TunnelHealthChecker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger(__name__)

# YAML settings file for app factories started by import string (uvicorn --reload)
SETTINGS_FILE_ENV = "TUNNELROUTE_SETTINGS_FILE"

# Global references set by create_app()
_settings: Settings | None = None
_store: ConfigStore | None = None
_status_service: TunnelStatusService | None = None


def load_settings() -> Settings:
    """Load settings from the YAML file named by SETTINGS_FILE_ENV, else the environment."""
    path = os.environ.get(SETTINGS_FILE_ENV)
    return Settings.from_yaml(path) if path else Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    if _settings is None:
        raise RuntimeError("Settings not initialized. Call create_app() first.")
    return _settings


def get_store() -> ConfigStore:
    """Get the global configuration store."""
    if _store is None:
        raise RuntimeError("Config store not initialized. Call create_app() first.")
    return _store


def get_status_service() -> TunnelStatusService:
    """Get the global tunnel status service."""
    if _status_service is None:
        raise RuntimeError("Status service not initialized. Call create_app() first.")
    return _status_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_structured)

    logger.info("Starting tunnelroute API", operator_auth=settings.operator_token is not None)
    yield
    logger.info("Shutting down tunnelroute API")


def create_app(
    store: ConfigStore | None = None,
    settings: Settings | None = None,
    status_service: TunnelStatusService | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        store: Configuration store. Defaults to a JSON store at
            settings.store_path with defaults filled in.
        settings: Process settings; see load_settings() when omitted.
        status_service: Status service; built from store and settings when
            omitted.

    Returns:
        Configured FastAPI application.
    """
    global _settings, _store, _status_service

    _settings = settings or load_settings()
    if store is None:
        store = JsonConfigStore(_settings.store_path)
        ensure_defaults(store)
    _store = store
    _status_service = status_service or TunnelStatusService(
        store,
        checker=TunnelHealthChecker(_settings.ip_echo_url),
    )

    app = FastAPI(
        title="tunnelroute",
        description="SOCKS5 tunnel routing operator API",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(tunnel.router, prefix="/api/tunnel", tags=["tunnel"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    logger.info("FastAPI app created", store=type(store).__name__)
    return app
