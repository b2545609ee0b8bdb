"""Configuration store."""

from tunnelroute.core.config.store import (
    DEFAULTS,
    ConfigStore,
    ConfigStoreError,
    JsonConfigStore,
    MemoryConfigStore,
    ensure_defaults,
    sanitize_settings,
    save_settings,
)

__all__ = [
    "DEFAULTS",
    "ConfigStore",
    "ConfigStoreError",
    "JsonConfigStore",
    "MemoryConfigStore",
    "ensure_defaults",
    "sanitize_settings",
    "save_settings",
]
