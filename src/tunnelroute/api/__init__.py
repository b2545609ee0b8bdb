"""tunnelroute operator API."""

from tunnelroute.api.app import (
    SETTINGS_FILE_ENV,
    create_app,
    get_settings,
    get_status_service,
    get_store,
    load_settings,
)

__all__ = [
    "SETTINGS_FILE_ENV",
    "create_app",
    "get_settings",
    "get_status_service",
    "get_store",
    "load_settings",
]
