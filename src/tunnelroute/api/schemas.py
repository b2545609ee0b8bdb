"""Pydantic schemas for the operator API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class TunnelConfigUpdate(BaseModel):
    """Partial update of the tunnel settings."""

    tunnel_host: str | None = Field(default=None, max_length=255)
    tunnel_port: int | None = Field(default=None, ge=1, le=65535)
    debug_mode: bool | None = None
    route_all: bool | None = None
    whitelist_domains: list[str] | None = None

    @field_validator("tunnel_host")
    @classmethod
    def host_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("tunnel_host must not be blank")
        return v


class TunnelConfigResponse(BaseModel):
    """Current tunnel settings snapshot."""

    tunnel_host: str
    tunnel_port: int
    debug_mode: bool
    route_all: bool
    whitelist_domains: list[str]
    proxy_url: str


class RouteDecisionResponse(BaseModel):
    """Routing decision preview for one URL."""

    url: str
    host: str | None
    route: bool


class TunnelStatusSchema(BaseModel):
    """Result of one tunnel probe."""

    status: Literal["success", "error"]
    message: str
    external_ip: str | None = None


class StatusReportResponse(BaseModel):
    """Response of the "test tunnel now" operation."""

    tunnel_status: TunnelStatusSchema
    active_tunnels: list[str] = Field(default_factory=list)
    direct_ip: str | None = None
