"""Key/value configuration stores for tunnel routing settings."""

from __future__ import annotations

import json
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from tunnelroute.core.errors import TunnelRouteError
from tunnelroute.core.models.tunnel import (
    DEFAULT_TUNNEL_HOST,
    DEFAULT_TUNNEL_PORT,
    coerce_bool,
    coerce_port,
    parse_whitelist,
)

logger = structlog.get_logger(__name__)

DEFAULTS: dict[str, Any] = {
    "tunnel_host": DEFAULT_TUNNEL_HOST,
    "tunnel_port": DEFAULT_TUNNEL_PORT,
    "debug_mode": False,
    "route_all": False,
    "whitelist_domains": "",
}


class ConfigStoreError(TunnelRouteError):
    """Raised when the configuration cannot be persisted."""

    pass


@runtime_checkable
class ConfigStore(Protocol):
    """Contract for configuration stores."""

    def get(self, key: str, default: Any = None) -> Any:
        """Get a stored value."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a single value."""
        ...

    def update(self, values: Mapping[str, Any]) -> None:
        """Store several values at once."""
        ...

    def all(self) -> dict[str, Any]:
        """Return a copy of every stored value."""
        ...


class MemoryConfigStore:
    """In-process configuration store."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def update(self, values: Mapping[str, Any]) -> None:
        with self._lock:
            self._values.update(values)

    def all(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._values)


class JsonConfigStore:
    """Configuration store persisted as a JSON file.

    The file is read once at construction and rewritten on every change.
    """

    def __init__(self, path: Path | str = "data/config/tunnel.json") -> None:
        """Initialize JSON store.

        Args:
            path: Location of the JSON file; parent directories are created
                on the first write.
        """
        self.path = Path(path)
        self._cache: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        """Load values from file."""
        if not self.path.exists():
            self._cache = {}
            return

        try:
            content = self.path.read_text()
            data = json.loads(content) if content.strip() else {}
        except (OSError, ValueError) as e:
            logger.error("Failed to load tunnel config", path=str(self.path), error=str(e))
            data = {}

        if not isinstance(data, dict):
            logger.error("Tunnel config is not a JSON object", path=str(self.path))
            data = {}

        self._cache = data
        logger.debug("Loaded tunnel config", path=str(self.path), keys=list(data.keys()))

    def _save(self) -> None:
        """Write values to file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._cache, indent=2, default=str))
        except OSError as e:
            logger.error("Failed to save tunnel config", path=str(self.path), error=str(e))
            raise ConfigStoreError(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._cache.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = value
            self._save()

    def update(self, values: Mapping[str, Any]) -> None:
        with self._lock:
            self._cache.update(values)
            self._save()

    def all(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._cache)


def ensure_defaults(store: ConfigStore) -> list[str]:
    """Write default values for every missing key.

    Returns:
        The keys that were written.
    """
    current = store.all()
    missing = {k: v for k, v in DEFAULTS.items() if k not in current}
    if missing:
        store.update(missing)
        logger.info("Initialized tunnel config defaults", keys=sorted(missing))
    return sorted(missing)


def sanitize_settings(values: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize operator input into storable values.

    Unknown keys are ignored. The host is trimmed text, the port a positive
    integer, flags booleans and the whitelist a newline-separated string.
    """
    clean: dict[str, Any] = {}

    if "tunnel_host" in values:
        host = values["tunnel_host"]
        clean["tunnel_host"] = str(host).strip() if host is not None else ""
    if "tunnel_port" in values:
        clean["tunnel_port"] = coerce_port(values["tunnel_port"])
    if "debug_mode" in values:
        clean["debug_mode"] = coerce_bool(values["debug_mode"])
    if "route_all" in values:
        clean["route_all"] = coerce_bool(values["route_all"])
    if "whitelist_domains" in values:
        clean["whitelist_domains"] = "\n".join(parse_whitelist(values["whitelist_domains"]))

    return clean


def save_settings(store: ConfigStore, values: Mapping[str, Any]) -> dict[str, Any]:
    """Sanitize and persist operator settings.

    The next snapshot taken from the store reflects the change.

    Returns:
        The sanitized values that were written.
    """
    clean = sanitize_settings(values)
    if clean:
        store.update(clean)
        logger.info("Saved tunnel config", keys=sorted(clean))
    return clean
