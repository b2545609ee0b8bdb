"""Application settings using Pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IP_ECHO_URL = "https://api.ipify.org?format=json"


class Settings(BaseSettings):
    """Process-level settings.

    Tunnel routing values (host, port, whitelist, ...) are not here: they live
    in the configuration store so operators can change them at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="TUNNELROUTE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Configuration store
    store_path: Path = Path("data/config/tunnel.json")

    # Operator API
    operator_token: str | None = None
    api_host: str = "127.0.0.1"
    api_port: int = Field(default=8000, ge=1, le=65535)

    # Outbound requests
    ip_echo_url: str = DEFAULT_IP_ECHO_URL
    ca_bundle: str | None = None  # None = certifi bundle
    request_timeout: float = Field(default=30.0, gt=0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_structured: bool = False

    @classmethod
    def from_yaml(cls, path: Path | str) -> Settings:
        """Load settings from YAML file."""
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open() as f:
            data = yaml.safe_load(f)

        return cls(**data) if data else cls()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump(mode="json")

    def to_yaml(self, path: Path | str) -> None:
        """Save settings to YAML file."""
        import yaml

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)
